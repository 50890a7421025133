"""
Protocol adapters for the nutrition API.

``ModernAdapter`` authenticates with a cached bearer token; ``LegacyAdapter``
signs every request. Both return the decoded JSON body and raise
``UpstreamError`` for any non-success status.
"""

import time
from typing import Any, Callable, Dict, Mapping, Optional

import httpx

from shared.config import BaseConfig
from shared.errors import ConfigurationError
from shared.metrics import MetricsCollector
from ..upstream import check_response
from .signing import OAUTH_VERSION, SIGNATURE_METHOD, generate_nonce, sign
from .token_acquirer import TokenAcquirer


RESPONSE_FORMAT = "json"
METHOD_ENDPOINT = "server.api"


class ModernAdapter:
    """Bearer-token client for the REST-style endpoints."""

    service = "FatSecret OAuth2"

    def __init__(self, config: BaseConfig, acquirer: TokenAcquirer,
                 metrics: Optional[MetricsCollector] = None):
        self.config = config
        self.acquirer = acquirer
        self.metrics = metrics

    def _url(self, path: str) -> str:
        return f"{self.config.fs_api_root.rstrip('/')}/{path.lstrip('/')}"

    async def get(self, path: str, params: Mapping[str, str]) -> Any:
        token = await self.acquirer.get_valid_token()
        query: Dict[str, str] = {"format": RESPONSE_FORMAT, **params}

        async with httpx.AsyncClient(timeout=self.config.upstream_timeout_seconds) as client:
            response = await client.get(
                self._url(path),
                params=query,
                headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            )
        return check_response(self.service, response, self.metrics)

    async def post_method(self, method: str, params: Mapping[str, str]) -> Any:
        """Invoke a generic ``server.api`` method with a form-encoded body."""
        token = await self.acquirer.get_valid_token()
        body: Dict[str, str] = {"method": method, "format": RESPONSE_FORMAT, **params}

        async with httpx.AsyncClient(timeout=self.config.upstream_timeout_seconds) as client:
            response = await client.post(
                self._url(METHOD_ENDPOINT),
                data=body,
                headers={"Authorization": f"Bearer {token}", "Accept": "application/json"},
            )
        return check_response(self.service, response, self.metrics)


class LegacyAdapter:
    """Signed-request client for the single ``server.api`` endpoint."""

    service = "FatSecret OAuth1"

    def __init__(self, config: BaseConfig, metrics: Optional[MetricsCollector] = None,
                 clock: Callable[[], float] = time.time,
                 nonce_factory: Callable[[], str] = generate_nonce):
        self.config = config
        self.metrics = metrics
        self._clock = clock
        self._nonce_factory = nonce_factory

    @property
    def endpoint(self) -> str:
        return f"{self.config.fs_api_root.rstrip('/')}/{METHOD_ENDPOINT}"

    def signed_params(self, method: str, params: Mapping[str, str]) -> Dict[str, str]:
        """Build the full query, ``oauth_signature`` last."""
        consumer_key = self.config.fs_oauth1_consumer_key
        consumer_secret = self.config.fs_oauth1_consumer_secret
        if not consumer_key or not consumer_secret:
            raise ConfigurationError("FatSecret OAuth1 secrets missing")

        query: Dict[str, str] = {
            "method": method,
            "format": RESPONSE_FORMAT,
            **params,
            "oauth_consumer_key": consumer_key,
            "oauth_nonce": self._nonce_factory(),
            "oauth_signature_method": SIGNATURE_METHOD,
            "oauth_timestamp": str(int(self._clock())),
            "oauth_version": OAUTH_VERSION,
        }
        query["oauth_signature"] = sign("GET", self.endpoint, query, consumer_secret)
        return query

    async def call(self, method: str, params: Mapping[str, str]) -> Any:
        query = self.signed_params(method, params)

        async with httpx.AsyncClient(timeout=self.config.upstream_timeout_seconds) as client:
            response = await client.get(
                self.endpoint,
                params=query,
                headers={"Accept": "application/json"},
            )
        return check_response(self.service, response, self.metrics)
