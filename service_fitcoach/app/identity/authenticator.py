"""
Caller authentication for callable functions.
"""

from typing import Dict, Any

from fastapi import Request

from shared.logging import get_logger, set_caller_context
from shared.errors import UnauthenticatedError
from .client import IdentityClient


class CallerAuthenticator:
    """Resolves the caller behind a request or rejects it."""

    def __init__(self, identity_client: IdentityClient):
        self.identity_client = identity_client
        self.logger = get_logger("fitcoach.authenticator")

    async def authenticate_request(self, request: Request) -> Dict[str, Any]:
        """Return the caller's user info from a verified bearer ID token."""
        auth_header = request.headers.get("Authorization")
        if not auth_header:
            raise UnauthenticatedError("Sign-in required.")

        if not auth_header.startswith("Bearer ") or not auth_header[7:].strip():
            raise UnauthenticatedError("Invalid authorization header format")

        token = auth_header[7:].strip()
        user_info = await self.identity_client.verify_token(token)

        caller_id = user_info.get("user_id")
        if not caller_id:
            raise UnauthenticatedError("Verified identity carries no user id")

        set_caller_context(caller_id)
        self.logger.info("Caller authenticated", caller_id=caller_id)

        request.state.caller = user_info
        return user_info
