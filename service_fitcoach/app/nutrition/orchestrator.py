"""
Protocol selection and modern-to-legacy fallback.
"""

from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TypeVar

from shared.errors import AccessLayerException
from shared.logging import get_logger
from shared.metrics import MetricsCollector


T = TypeVar("T")
ProtocolCall = Callable[[], Awaitable[T]]


class AuthMode(Enum):
    """Which nutrition API protocol(s) a call may use."""
    MODERN = "modern"
    LEGACY = "legacy"
    AUTOMATIC = "automatic"


_MODE_ALIASES = {
    "modern": AuthMode.MODERN,
    "oauth2": AuthMode.MODERN,
    "legacy": AuthMode.LEGACY,
    "oauth1": AuthMode.LEGACY,
}


def resolve_auth_mode(raw: Optional[str]) -> AuthMode:
    """Case-insensitive; anything unrecognised means automatic."""
    return _MODE_ALIASES.get((raw or "").strip().lower(), AuthMode.AUTOMATIC)


class FallbackOrchestrator:
    """Runs the modern or legacy call for an operation.

    The mode is read from ``mode_provider`` once per ``run``. In automatic mode
    the legacy call runs exactly once after any modern failure and its outcome
    is final; the modern error is logged but not surfaced.
    """

    def __init__(self, mode_provider: Callable[[], Optional[str]],
                 metrics: Optional[MetricsCollector] = None):
        self._mode_provider = mode_provider
        self.metrics = metrics
        self.logger = get_logger("fitcoach.nutrition.orchestrator")

    def current_mode(self) -> AuthMode:
        return resolve_auth_mode(self._mode_provider())

    async def run(self, modern: ProtocolCall, legacy: ProtocolCall,
                  operation: str = "unknown") -> Any:
        mode = self.current_mode()

        if mode is AuthMode.MODERN:
            return await modern()
        if mode is AuthMode.LEGACY:
            return await legacy()

        try:
            return await modern()
        except Exception as exc:
            self.logger.warning(
                "Modern protocol failed, falling back to legacy",
                operation=operation,
                error_type=type(exc).__name__,
                error_code=exc.code if isinstance(exc, AccessLayerException) else None
            )
            if self.metrics is not None:
                self.metrics.increment_counter("auth_fallback_total", operation=operation)

        return await legacy()
