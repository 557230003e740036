"""
Registry of destination hosts trusted to receive bearer tokens.
"""

import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Iterable, Optional

from shared.errors import MalformedInputError
from shared.logging import get_logger
from ..constants import DEFAULT_TRUSTED_HOSTS
from .hosts import UrlLike, host_of


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TrustedHostRegistry:
    """Maps hostnames to the time until which they may receive tokens.

    A registry is created once by the hosting service and handed to every
    credential. Reads and writes may come from concurrent requests; each
    entry is independent so a single lock around the map is enough.
    """

    TRUST_DURATION = timedelta(days=1)
    # Hosts stay trusted this long past their expiry to absorb clock skew
    EXPIRY_GRACE = timedelta(minutes=5)
    NEVER_EXPIRES = datetime.max.replace(tzinfo=timezone.utc)

    def __init__(
        self,
        default_hosts: Iterable[str] = DEFAULT_TRUSTED_HOSTS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._clock = clock or utcnow
        self._lock = threading.Lock()
        self._expirations: Dict[str, datetime] = {
            host.lower(): self.NEVER_EXPIRES for host in default_hosts
        }
        self.logger = get_logger("connector_auth.trust")

    def now(self) -> datetime:
        return as_utc(self._clock())

    def trust(self, url_or_host: UrlLike, expires_at: Optional[datetime] = None) -> None:
        """Trust the host of ``url_or_host`` until ``expires_at`` (default: one day).

        Malformed input is logged and ignored.
        """
        try:
            host = host_of(url_or_host)
        except MalformedInputError as e:
            self.logger.error("Ignoring trust request for malformed service URL", error=e.message, **e.details)
            return

        if expires_at is None:
            expires_at = self.now() + self.TRUST_DURATION
        expires_at = as_utc(expires_at)

        with self._lock:
            self._expirations[host] = expires_at

        self.logger.debug("Service URL trusted", host=host, expires_at=expires_at.isoformat())

    def is_trusted(self, url_or_host: UrlLike) -> bool:
        """Return True if tokens may be sent to the host of ``url_or_host``.

        Malformed input is never trusted.
        """
        try:
            host = host_of(url_or_host)
        except MalformedInputError as e:
            self.logger.error("Treating malformed service URL as untrusted", error=e.message, **e.details)
            return False

        with self._lock:
            expires_at = self._expirations.get(host)

        if expires_at is None:
            return False
        return expires_at >= self.now() - self.EXPIRY_GRACE

    def expiry_for(self, url_or_host: UrlLike) -> Optional[datetime]:
        """Return the recorded expiry for a host, or None if it was never trusted."""
        try:
            host = host_of(url_or_host)
        except MalformedInputError:
            return None
        with self._lock:
            return self._expirations.get(host)
