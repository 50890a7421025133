"""
OAuth2 client-credentials exchange for the nutrition API.
"""

from typing import Optional

import httpx

from shared.config import BaseConfig
from shared.errors import ConfigurationError, UpstreamError
from shared.logging import get_logger
from shared.metrics import MetricsCollector
from ..upstream import check_response
from .token_cache import TokenCache


TOKEN_SERVICE = "FatSecret token"
DEFAULT_TOKEN_LIFETIME_SECONDS = 3000


class TokenAcquirer:
    """Exchanges the client id/secret for a bearer token and caches it."""

    def __init__(self, config: BaseConfig, cache: Optional[TokenCache] = None,
                 metrics: Optional[MetricsCollector] = None):
        self.config = config
        self.cache = cache or TokenCache()
        self.metrics = metrics
        self.logger = get_logger("fitcoach.nutrition.token")

    async def get_valid_token(self) -> str:
        """Return a usable bearer token, refreshing it when the cache is stale."""
        token = self.cache.get()
        if token is not None:
            return token
        return await self.fetch_token()

    async def fetch_token(self) -> str:
        """Request a new token from the issuance endpoint.

        Safe to call concurrently; the last successful exchange wins.
        """
        client_id = self.config.fs_oauth2_client_id
        client_secret = self.config.fs_oauth2_client_secret
        if not client_id or not client_secret:
            raise ConfigurationError("FatSecret OAuth2 secrets missing")

        async with httpx.AsyncClient(timeout=self.config.upstream_timeout_seconds) as client:
            response = await client.post(
                self.config.fs_token_url,
                data={"grant_type": "client_credentials", "scope": self.config.fs_token_scope},
                headers={"Accept": "application/json"},
                auth=(client_id, client_secret),
            )

        try:
            payload = check_response(TOKEN_SERVICE, response, self.metrics)
        except UpstreamError:
            self._record_refresh("error")
            raise

        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            self._record_refresh("error")
            raise UpstreamError(TOKEN_SERVICE, response.status_code, response.text,
                                details={"reason": "access_token missing"})

        lifetime = payload.get("expires_in")
        if lifetime is None:
            lifetime = DEFAULT_TOKEN_LIFETIME_SECONDS
        try:
            lifetime_seconds = float(lifetime)
        except (TypeError, ValueError):
            self._record_refresh("error")
            raise UpstreamError(TOKEN_SERVICE, response.status_code, response.text,
                                details={"reason": "invalid expires_in"})

        entry = self.cache.store(str(token), lifetime_seconds)
        self._record_refresh("ok")

        self.logger.info(
            "Bearer token refreshed",
            expires_in=lifetime,
            expires_at=entry.expires_at
        )
        return entry.token

    def _record_refresh(self, status: str):
        if self.metrics is not None:
            self.metrics.increment_counter("token_refresh_total", status=status)
