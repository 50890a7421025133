"""
Integration tests for the nutrition flow over a mocked HTTP transport.
"""

import base64
from typing import List
from urllib.parse import parse_qsl

import pytest
import httpx
from unittest.mock import patch

from service_fitcoach.app.nutrition.service import NutritionService
from service_fitcoach.app.nutrition.signing import sign
from service_fitcoach.app.nutrition.token_cache import TokenCache
from shared.errors import UpstreamError
from shared.metrics import MetricsCollector
from shared.test_helpers import UpstreamPayloadFactory as payloads, make_config


RealAsyncClient = httpx.AsyncClient

TOKEN_URL = "https://oauth.fatsecret.com/connect/token"
SERVER_API = "https://platform.fatsecret.com/rest/server.api"


def _base_url(request: httpx.Request) -> str:
    return f"{request.url.scheme}://{request.url.host}{request.url.path}"


class FakeNutritionAPI:
    """Transport handler standing in for the token and data endpoints."""

    def __init__(self, modern_status: int = 200):
        self.modern_status = modern_status
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = _base_url(request)

        if url == TOKEN_URL:
            return httpx.Response(200, json=payloads.token("bearer-xyz", 3600))

        if url.endswith("/foods/search/v3"):
            if self.modern_status != 200:
                return httpx.Response(self.modern_status, text="modern unavailable")
            return httpx.Response(200, json=payloads.search_v3(payloads.food("1", "Apple")))

        if url == SERVER_API and "oauth_signature" in request.url.params:
            return httpx.Response(200, json=payloads.search_v2([
                payloads.food("2", "Pear"), payloads.food("3", "Plum")
            ]))

        return httpx.Response(404, text="unexpected request")

    def to(self, suffix: str) -> List[httpx.Request]:
        return [r for r in self.requests if _base_url(r).endswith(suffix)]


def mocked_client(api: FakeNutritionAPI):
    return patch(
        "httpx.AsyncClient",
        new=lambda **kwargs: RealAsyncClient(transport=httpx.MockTransport(api), **kwargs),
    )


class TestNutritionFlow:
    """Integration tests for token reuse and protocol fallback."""

    @pytest.mark.asyncio
    async def test_token_fetched_once_across_searches(self):
        api = FakeNutritionAPI()
        service = NutritionService.from_config(make_config(fs_api_mode="oauth2"), cache=TokenCache())

        with mocked_client(api):
            first = await service.search_foods("apple")
            second = await service.search_foods("apple", 10, 1)

        assert [f.name for f in first] == ["Apple"]
        assert [f.name for f in second] == ["Apple"]

        token_requests = api.to("/connect/token")
        assert len(token_requests) == 1
        expected_basic = base64.b64encode(b"client-id:client-secret").decode()
        assert token_requests[0].headers["Authorization"] == f"Basic {expected_basic}"
        assert dict(parse_qsl(token_requests[0].content.decode())) == {
            "grant_type": "client_credentials",
            "scope": "premier barcode",
        }

        searches = api.to("/foods/search/v3")
        assert len(searches) == 2
        assert all(r.headers["Authorization"] == "Bearer bearer-xyz" for r in searches)
        assert searches[1].url.params["max_results"] == "10"
        assert searches[1].url.params["page_number"] == "1"

    @pytest.mark.asyncio
    async def test_modern_failure_falls_back_to_signed_call(self):
        api = FakeNutritionAPI(modern_status=500)
        metrics = MetricsCollector("fitcoach")
        service = NutritionService.from_config(make_config(fs_api_mode="auto"), metrics, TokenCache())

        with mocked_client(api):
            foods = await service.search_foods("pear")

        assert [f.id for f in foods] == ["2", "3"]

        legacy = api.to("/server.api")
        assert len(legacy) == 1
        params = dict(legacy[0].url.params)
        assert params["method"] == "foods.search.v2"
        assert params["search_expression"] == "pear"
        assert "Authorization" not in legacy[0].headers

        signature = params.pop("oauth_signature")
        assert signature == sign("GET", SERVER_API, params, "consumer-secret")

        assert metrics.registry.get_sample_value(
            "auth_fallback_total", {"operation": "search_foods"}
        ) == 1.0
        assert metrics.registry.get_sample_value(
            "upstream_requests_total", {"upstream": "FatSecret OAuth2", "status": "500"}
        ) == 1.0

    @pytest.mark.asyncio
    async def test_modern_only_surfaces_modern_failure(self):
        api = FakeNutritionAPI(modern_status=502)
        service = NutritionService.from_config(make_config(fs_api_mode="oauth2"), cache=TokenCache())

        with mocked_client(api):
            with pytest.raises(UpstreamError) as exc_info:
                await service.search_foods("pear")

        assert exc_info.value.upstream_status == 502
        assert api.to("/server.api") == []
