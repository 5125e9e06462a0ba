"""In-memory holder for the eBay application access token."""

import time
from collections.abc import Callable


class AppTokenCache:
    """Caches an OAuth application token until shortly before it expires.

    The cache is an explicit object handed to the Browse client so every
    client (and every test) decides which cache it shares.

    Attributes:
        refresh_margin: Seconds before expiry at which the token counts as stale.
    """

    def __init__(self, refresh_margin: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.refresh_margin = refresh_margin
        self._clock = clock
        self._token: str | None = None
        self._expires_at: float = 0.0

    def get(self) -> str | None:
        """Return the cached token if it is still fresh."""
        if self._token and self._clock() < self._expires_at - self.refresh_margin:
            return self._token
        return None

    def store(self, token: str, expires_in: float) -> None:
        """Remember a token valid for expires_in seconds from now."""
        self._token = token
        self._expires_at = self._clock() + expires_in

    def clear(self) -> None:
        self._token = None
        self._expires_at = 0.0
