"""OAuth2 access-token cache shared by supplier calls in one warm container."""

import threading
import time
from typing import Callable


class AccessTokenCache:
    """Holds one bearer token until shortly before it expires.

    Reads and writes are guarded by a lock; the fetch itself runs outside it,
    so concurrent misses may each fetch a token and the last one wins.
    """

    EXPIRY_BUFFER_SECONDS = 60

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._token: str | None = None
        self._expires_at = 0.0

    def get(self) -> str | None:
        with self._lock:
            if self._token and self._clock() < self._expires_at:
                return self._token
            return None

    def store(self, token: str, expires_in: float) -> None:
        with self._lock:
            self._token = token
            self._expires_at = self._clock() + max(expires_in - self.EXPIRY_BUFFER_SECONDS, 0)

    def invalidate(self) -> None:
        with self._lock:
            self._token = None
            self._expires_at = 0.0

    def refresh_if_expired(self, fetch: Callable[[], tuple[str, float]]) -> str:
        """Return the cached token, calling `fetch` for a new (token, expires_in) when stale."""
        token = self.get()
        if token is not None:
            return token
        token, expires_in = fetch()
        self.store(token, expires_in)
        return token
