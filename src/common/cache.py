"""On-disk TTL cache for registry responses.

Entries are JSON files named after the SHA-256 of their key, so several
concurrent runs can share one cache directory. The cache is advisory: an
unreadable or corrupt entry is a miss, and a failed write is ignored.
"""

from __future__ import annotations

import email.utils
import hashlib
import json
import logging
import os
import re
import tempfile
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from common.config import ConfigService, default_config_dir
from common.logging_utils import extra_context, is_debug_enabled
from constants import Constants

logger = logging.getLogger(__name__)

_MAX_AGE_RE = re.compile(r"max-age=(\d+)", re.IGNORECASE)


@dataclass
class CacheEntry:
    """A single cache entry with TTL."""

    value: Any
    expires_at: float
    created_at: float = field(default_factory=time.time)

    def is_expired(self) -> bool:
        """Check if this entry has expired."""
        return time.time() > self.expires_at


def parse_cache_headers(headers: Mapping[str, str], now: Optional[float] = None) -> Optional[int]:
    """Derive a lifetime in seconds from HTTP caching headers.

    Returns 0 for ``no-cache``/``no-store`` and None when the headers say
    nothing usable.
    """
    lowered = {str(k).lower(): str(v) for k, v in headers.items()}
    cache_control = lowered.get("cache-control")
    if cache_control:
        match = _MAX_AGE_RE.search(cache_control)
        if match:
            return int(match.group(1))
        directives = cache_control.lower()
        if "no-cache" in directives or "no-store" in directives:
            return 0

    expires = lowered.get("expires")
    if expires:
        try:
            expires_dt = email.utils.parsedate_to_datetime(expires)
        except (TypeError, ValueError):
            return None
        if expires_dt is None:
            return None
        remaining = int(expires_dt.timestamp() - (now if now is not None else time.time()))
        if remaining > 0:
            return remaining
    return None


class CacheService:
    """Response cache keyed by request URL."""

    def __init__(self, config: ConfigService, cache_dir: Optional[str] = None):
        self._config = config
        self._cache_dir = cache_dir or os.path.join(default_config_dir(), Constants.CACHE_DIR_NAME)
        self._force_disabled = False
        try:
            os.makedirs(self._cache_dir, mode=0o755, exist_ok=True)
        except OSError as exc:
            logger.warning("Cache directory unavailable (%s); caching disabled", exc)
            self._force_disabled = True

    @property
    def cache_dir(self) -> str:
        return self._cache_dir

    def is_enabled(self) -> bool:
        if self._force_disabled:
            return False
        return bool(self._config.get("cache.enabled", True))

    def disable(self) -> None:
        self._force_disabled = True

    def cache_duration(self, headers: Optional[Mapping[str, str]] = None) -> int:
        """Lifetime for a new entry, clamped to the configured bounds.

        ``no-cache``/``no-store`` responses get 0, meaning do not store.
        """
        min_time = self._bound("cache.min-time", Constants.CACHE_MIN_TIME_SEC)
        max_time = self._bound("cache.max-time", Constants.CACHE_MAX_TIME_SEC)
        if headers is not None:
            duration = parse_cache_headers(headers)
            if duration == 0:
                return 0
            if duration is not None:
                return max(min_time, min(duration, max_time))
        return min_time

    def _bound(self, key: str, fallback: int) -> int:
        value = self._config.get(key, fallback)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Invalid %s value %r in configuration; using %s", key, value, fallback)
            return fallback

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value for ``key`` or None on a miss."""
        if not self.is_enabled():
            return None
        path = self._path_for(key)
        try:
            with open(path, "r", encoding="utf-8") as fh:
                raw = json.load(fh)
            entry = CacheEntry(value=raw["value"], expires_at=float(raw["expires_at"]),
                               created_at=float(raw.get("created_at", 0)))
        except FileNotFoundError:
            return None
        except (OSError, ValueError, KeyError, TypeError):
            logger.debug("Discarding unreadable cache entry %s", path)
            self._unlink(path)
            return None
        if entry.is_expired():
            self._unlink(path)
            return None
        if is_debug_enabled(logger):
            logger.debug("Cache hit", extra=extra_context(event="cache_hit", component="cache", key_hash=os.path.basename(path)))
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store ``value`` for ``ttl`` seconds (default: configured minimum)."""
        if not self.is_enabled():
            return
        duration = self.cache_duration() if ttl is None else ttl
        if duration <= 0:
            return
        entry = CacheEntry(value=value, expires_at=time.time() + duration)
        payload = {"value": entry.value, "expires_at": entry.expires_at, "created_at": entry.created_at}
        try:
            fd, tmp_path = tempfile.mkstemp(dir=self._cache_dir, prefix=".tmp-")
        except OSError as exc:
            logger.debug("Cache write failed: %s", exc)
            return
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh)
            os.replace(tmp_path, self._path_for(key))
        except (OSError, TypeError, ValueError) as exc:
            logger.debug("Cache write failed: %s", exc)
            self._unlink(tmp_path)

    def _path_for(self, key: str) -> str:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return os.path.join(self._cache_dir, f"{digest}.json")

    @staticmethod
    def _unlink(path: str) -> None:
        try:
            os.unlink(path)
        except OSError:
            pass
