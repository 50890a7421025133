"""
Unit tests for caller identity verification.
"""

import pytest
import httpx
from unittest.mock import AsyncMock, MagicMock, patch
from fastapi import Request

from service_fitcoach.app.identity.authenticator import CallerAuthenticator
from service_fitcoach.app.identity.client import IdentityClient
from shared.circuit_breaker import CircuitBreaker, CircuitBreakerOpenException
from shared.errors import UnauthenticatedError
from shared.logging import caller_id_var, clear_context
from shared.test_helpers import TestCaller, make_config, make_response


VERIFY_URL = "http://identity.test/auth/verify"


class TestIdentityClient:
    """Test cases for IdentityClient."""

    @pytest.fixture
    def identity_client(self):
        return IdentityClient(make_config())

    @pytest.fixture
    def mock_user_info(self):
        return TestCaller("user-123", "athlete@example.com").user_info()

    @pytest.mark.asyncio
    async def test_verify_token_success(self, identity_client, mock_user_info):
        """Test successful token verification."""
        with patch('httpx.AsyncClient') as mock_client:
            post = AsyncMock(return_value=make_response(
                200, {"valid": True, "user_info": mock_user_info}, method="POST", url=VERIFY_URL
            ))
            mock_client.return_value.__aenter__.return_value.post = post

            result = await identity_client.verify_token("id-token")

            assert result == mock_user_info
            post.assert_awaited_once_with(VERIFY_URL, json={"token": "id-token"})

    @pytest.mark.asyncio
    async def test_verify_token_invalid(self, identity_client):
        """Test a token the identity service rejects."""
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=make_response(200, {"valid": False, "error": "Token expired"}, method="POST")
            )

            with pytest.raises(UnauthenticatedError) as exc_info:
                await identity_client.verify_token("expired")

            assert exc_info.value.details == {"token_error": "Token expired"}

    @pytest.mark.asyncio
    async def test_verify_token_service_error(self, identity_client):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=make_response(500, text="boom", method="POST")
            )

            with pytest.raises(UnauthenticatedError) as exc_info:
                await identity_client.verify_token("id-token")

            assert exc_info.value.details == {"status_code": 500}

    @pytest.mark.asyncio
    async def test_verify_token_network_error(self, identity_client):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                side_effect=httpx.ConnectError("Connection failed")
            )

            with pytest.raises(UnauthenticatedError) as exc_info:
                await identity_client.verify_token("id-token")

            assert exc_info.value.code == "UNAUTHENTICATED"
            assert exc_info.value.details == {"http_error": "ConnectError"}

    @pytest.mark.asyncio
    async def test_verify_token_invalid_json(self, identity_client):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=make_response(200, text="not json", method="POST")
            )

            with pytest.raises(UnauthenticatedError):
                await identity_client.verify_token("id-token")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_info", ["user-123", ["user-123"], 42])
    async def test_verify_token_malformed_user_info(self, identity_client, user_info):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=make_response(200, {"valid": True, "user_info": user_info}, method="POST")
            )

            with pytest.raises(UnauthenticatedError) as exc_info:
                await identity_client.verify_token("id-token")

            assert exc_info.value.message == "Identity service returned an invalid response"

    @pytest.mark.asyncio
    async def test_circuit_opens_after_repeated_failures(self, identity_client):
        with patch('httpx.AsyncClient') as mock_client:
            post = AsyncMock(side_effect=httpx.ConnectError("Connection failed"))
            mock_client.return_value.__aenter__.return_value.post = post

            for _ in range(3):
                with pytest.raises(UnauthenticatedError):
                    await identity_client.verify_token("id-token")

            with pytest.raises(UnauthenticatedError) as exc_info:
                await identity_client.verify_token("id-token")

            assert exc_info.value.message == "Identity service unavailable"
            assert post.await_count == 3
            assert identity_client.circuit_breaker.is_open()


class TestCircuitBreaker:
    """Test cases for CircuitBreaker."""

    class Clock:
        def __init__(self):
            self.now = 1000.0

        def __call__(self):
            return self.now

    @pytest.mark.asyncio
    async def test_opens_at_threshold_and_recovers(self):
        clock = self.Clock()
        breaker = CircuitBreaker(failure_threshold=2, recovery_timeout=10.0, name="test", clock=clock)
        failing = AsyncMock(side_effect=RuntimeError("down"))

        for _ in range(2):
            with pytest.raises(RuntimeError):
                await breaker.call(failing)

        assert breaker.is_open()
        with pytest.raises(CircuitBreakerOpenException):
            await breaker.call(failing)
        assert failing.await_count == 2

        clock.now += 10.0
        assert await breaker.call(AsyncMock(return_value="ok")) == "ok"
        assert breaker.get_state()["state"] == "closed"
        assert breaker.get_state()["failure_count"] == 0

    @pytest.mark.asyncio
    async def test_half_open_failure_reopens(self):
        clock = self.Clock()
        breaker = CircuitBreaker(failure_threshold=1, recovery_timeout=5.0, clock=clock)
        failing = AsyncMock(side_effect=RuntimeError("down"))

        with pytest.raises(RuntimeError):
            await breaker.call(failing)
        clock.now += 5.0
        with pytest.raises(RuntimeError):
            await breaker.call(failing)

        assert breaker.is_open()
        assert breaker.get_state()["last_failure_time"] == clock.now


class TestCallerAuthenticator:
    """Test cases for CallerAuthenticator."""

    @pytest.fixture(autouse=True)
    def reset_context(self):
        clear_context()
        yield
        clear_context()

    @pytest.fixture
    def authenticator(self):
        return CallerAuthenticator(AsyncMock())

    @pytest.fixture
    def mock_request(self):
        request = MagicMock(spec=Request)
        request.headers = {}
        return request

    @pytest.mark.asyncio
    async def test_authenticate_request_success(self, authenticator, mock_request):
        user_info = TestCaller("user1", "user1@example.com").user_info()
        mock_request.headers = {"Authorization": "Bearer valid_token"}
        authenticator.identity_client.verify_token = AsyncMock(return_value=user_info)

        result = await authenticator.authenticate_request(mock_request)

        assert result == user_info
        assert mock_request.state.caller == user_info
        assert caller_id_var.get() == "user1"
        authenticator.identity_client.verify_token.assert_called_once_with("valid_token")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("headers", [
        {},
        {"Authorization": "Basic dXNlcjpwYXNz"},
        {"Authorization": "Bearer "},
        {"X-API-Key": "dev-key-123"},
    ])
    async def test_missing_or_malformed_header(self, authenticator, mock_request, headers):
        mock_request.headers = headers

        with pytest.raises(UnauthenticatedError):
            await authenticator.authenticate_request(mock_request)

        authenticator.identity_client.verify_token.assert_not_called()

    @pytest.mark.asyncio
    async def test_identity_without_user_id(self, authenticator, mock_request):
        mock_request.headers = {"Authorization": "Bearer valid_token"}
        authenticator.identity_client.verify_token = AsyncMock(return_value={"email": "x@example.com"})

        with pytest.raises(UnauthenticatedError):
            await authenticator.authenticate_request(mock_request)

    @pytest.mark.asyncio
    async def test_verification_failure_propagates(self, authenticator, mock_request):
        mock_request.headers = {"Authorization": "Bearer bad"}
        authenticator.identity_client.verify_token = AsyncMock(
            side_effect=UnauthenticatedError("Invalid credentials")
        )

        with pytest.raises(UnauthenticatedError) as exc_info:
            await authenticator.authenticate_request(mock_request)

        assert exc_info.value.message == "Invalid credentials"
