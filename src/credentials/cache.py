"""In-memory token cache owned by a single credential resolver."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from shared.logging import get_logger

logger = get_logger(__name__)

# Auth0 CLI tokens live for 60 minutes
DEFAULT_TTL = timedelta(minutes=55)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CachedToken:
    """A cached token and the moment it stops being served."""
    token: str
    expires_at: datetime


class TokenCache:
    """
    Single-entry token cache.

    Writes always overwrite the current entry with a fresh expiry.
    Expired entries read as empty.
    """

    def __init__(
        self,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = _utcnow
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entry: Optional[CachedToken] = None

    def get(self) -> Optional[str]:
        """Return the cached token if present and not expired."""
        if self._entry is None:
            return None
        if self._clock() >= self._entry.expires_at:
            logger.debug("Cached token expired", expired_at=self._entry.expires_at.isoformat())
            self._entry = None
            return None
        return self._entry.token

    def set(self, token: str) -> CachedToken:
        """Store a token with a fresh expiry."""
        self._entry = CachedToken(token=token, expires_at=self._clock() + self.ttl)
        logger.debug("Token cached", expires_at=self._entry.expires_at.isoformat())
        return self._entry

    def invalidate(self) -> None:
        """Drop the cached token."""
        self._entry = None

    @property
    def expires_at(self) -> Optional[datetime]:
        return self._entry.expires_at if self._entry else None
