"""
Identity service client used to verify caller ID tokens.
"""

from typing import Dict, Any, Optional

import httpx

from shared.config import BaseConfig
from shared.logging import get_logger
from shared.errors import UnauthenticatedError
from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException


class IdentityClient:
    """Client for the external identity service's verify endpoint."""

    def __init__(self, config: BaseConfig, circuit_breaker: Optional[CircuitBreaker] = None):
        self.identity_service_url = config.identity_service_url.rstrip("/")
        self.timeout = config.identity_timeout_seconds
        self.logger = get_logger("fitcoach.identity_client")
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=3,
            recovery_timeout=30.0,
            name="identity_service"
        )

    async def verify_token(self, token: str) -> Dict[str, Any]:
        """Verify an ID token and return the caller's user info."""
        async def _verify_token():
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.identity_service_url}/auth/verify",
                    json={"token": token}
                )

            if response.status_code != 200:
                raise UnauthenticatedError(
                    f"Identity service error: {response.status_code}",
                    details={"status_code": response.status_code}
                )
            return response.json()

        try:
            result = await self.circuit_breaker.call(_verify_token)
        except UnauthenticatedError:
            raise
        except CircuitBreakerOpenException as e:
            self.logger.error("Identity service circuit open", error=str(e))
            raise UnauthenticatedError("Identity service unavailable")
        except httpx.HTTPError as e:
            self.logger.error("Identity service HTTP error", error=str(e))
            raise UnauthenticatedError(
                "Identity service unavailable",
                details={"http_error": type(e).__name__}
            )
        except ValueError as e:
            self.logger.error("Identity service returned invalid JSON", error=str(e))
            raise UnauthenticatedError("Identity service returned an invalid response")

        if not isinstance(result, dict) or not result.get("valid"):
            error = result.get("error") if isinstance(result, dict) else None
            self.logger.warning("Token validation failed", error=error)
            raise UnauthenticatedError("Invalid credentials", details={"token_error": error})

        user_info = result.get("user_info") or {}
        if not isinstance(user_info, dict):
            self.logger.warning("Identity service returned malformed user info")
            raise UnauthenticatedError("Identity service returned an invalid response")

        return user_info
