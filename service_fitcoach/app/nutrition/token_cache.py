"""
Single-slot in-memory cache for the nutrition API bearer token.
"""

import time
from dataclasses import dataclass
from typing import Callable, Optional


DEFAULT_SAFETY_MARGIN_SECONDS = 30.0


@dataclass(frozen=True)
class CachedToken:
    """A bearer token and the instant after which it must not be used."""
    token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class TokenCache:
    """Holds at most one bearer token.

    Entries are immutable and replaced whole, so concurrent refreshes can only
    ever leave one complete, valid-at-write-time token behind.
    """

    def __init__(self, clock: Callable[[], float] = time.time,
                 safety_margin_seconds: float = DEFAULT_SAFETY_MARGIN_SECONDS):
        self._clock = clock
        self.safety_margin_seconds = safety_margin_seconds
        self._entry: Optional[CachedToken] = None

    @property
    def entry(self) -> Optional[CachedToken]:
        return self._entry

    def get(self) -> Optional[str]:
        """Return the cached token if it is still usable, else None."""
        entry = self._entry
        if entry is not None and entry.is_valid(self._clock()):
            return entry.token
        return None

    def store(self, token: str, lifetime_seconds: float) -> CachedToken:
        """Replace the slot with a token expiring ``lifetime - margin`` from now."""
        usable_for = max(0.0, float(lifetime_seconds) - self.safety_margin_seconds)
        entry = CachedToken(token=token, expires_at=self._clock() + usable_for)
        self._entry = entry
        return entry

    def clear(self):
        self._entry = None
