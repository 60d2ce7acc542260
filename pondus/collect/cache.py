"""
On-disk cache of raw provider payloads.

One JSON file per provider key:

    {"fetched_at": "<iso8601>", "ttl_hours": 24, "data": <raw payload>}

Reads never fail: a missing, unreadable, malformed or expired entry is a miss.
Writes are atomic (temp file in the same directory, fsync, os.replace), so a
reader sees either the previous complete entry or the new one.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_HOURS = 24
ENTRY_SUFFIX = ".json"
TEMP_SUFFIX = ".partial"


class CacheWriteError(Exception):
    """Raised when a cache entry cannot be persisted."""
    pass


def default_cache_dir() -> Path:
    """$XDG_CACHE_HOME/pondus, falling back to ~/.cache/pondus."""
    base = os.environ.get("XDG_CACHE_HOME", "").strip()
    root = Path(base) if base else Path.home() / ".cache"
    return root / "pondus"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheEntry:
    """Persisted provider payload."""
    key: str
    fetched_at: datetime
    ttl_hours: float
    data: Any

    def is_fresh(self, now: datetime) -> bool:
        return now - self.fetched_at < timedelta(hours=self.ttl_hours)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fetched_at": self.fetched_at.isoformat(),
            "ttl_hours": self.ttl_hours,
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, key: str, data: Dict[str, Any]) -> "CacheEntry":
        """Deserialize from dict.

        Raises:
            KeyError, TypeError, ValueError: if the entry is structurally invalid
        """
        if not isinstance(data, dict):
            raise TypeError(f"cache entry must be an object, got {type(data).__name__}")

        fetched_at = datetime.fromisoformat(data["fetched_at"])
        if fetched_at.tzinfo is None:
            fetched_at = fetched_at.replace(tzinfo=timezone.utc)

        ttl_hours = data["ttl_hours"]
        if isinstance(ttl_hours, bool) or not isinstance(ttl_hours, (int, float)):
            raise TypeError("ttl_hours must be a number")
        if ttl_hours < 0:
            raise ValueError("ttl_hours must be non-negative")

        return cls(key=key, fetched_at=fetched_at, ttl_hours=ttl_hours, data=data["data"])


class CacheStore:
    """TTL cache of raw payloads, one file per provider key."""

    def __init__(
        self,
        cache_dir: Optional[Path] = None,
        ttl_hours: float = DEFAULT_TTL_HOURS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.cache_dir = Path(cache_dir) if cache_dir else default_cache_dir()
        self.ttl_hours = ttl_hours
        self._clock = clock or _utcnow

    def path_for(self, key: str) -> Path:
        return self.cache_dir / f"{key}{ENTRY_SUFFIX}"

    def get(self, key: str) -> Optional[CacheEntry]:
        """Return the entry for ``key`` if present, valid and fresh, else None."""
        path = self.path_for(key)
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            entry = CacheEntry.from_dict(key, raw)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError, UnicodeDecodeError, KeyError, TypeError, ValueError) as e:
            logger.debug(f"Ignoring unreadable cache entry {path}: {e}")
            return None

        if not entry.is_fresh(self._clock()):
            logger.debug(f"Cache entry {key} expired (fetched {entry.fetched_at.isoformat()})")
            return None

        return entry

    def set(self, key: str, payload: Any) -> CacheEntry:
        """
        Atomically persist ``payload`` under ``key`` with the current time.

        Args:
            key: Provider key
            payload: JSON-compatible raw payload, stored verbatim

        Returns:
            The entry that was written

        Raises:
            CacheWriteError: If the payload cannot be serialized or written
        """
        entry = CacheEntry(key=key, fetched_at=self._clock(), ttl_hours=self.ttl_hours, data=payload)

        # Serialize first to catch JSON errors before touching the filesystem
        try:
            content = json.dumps(entry.to_dict(), indent=2, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise CacheWriteError(f"Failed to serialize cache entry for {key}: {e}") from e

        temp_path = None
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(prefix=f".{key}.", suffix=TEMP_SUFFIX, dir=self.cache_dir)
            with os.fdopen(fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self.path_for(key))
            temp_path = None
        except OSError as e:
            raise CacheWriteError(f"Failed to write cache entry for {key}: {e}") from e
        finally:
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)

        logger.debug(f"Cached {key} ({len(content)} bytes)")
        return entry

    def invalidate_all(self) -> int:
        """
        Expire every entry by deleting it.

        Returns:
            Number of entries removed
        """
        if not self.cache_dir.is_dir():
            return 0

        removed = 0
        for path in self.cache_dir.iterdir():
            if not path.is_file():
                continue
            try:
                if path.suffix == ENTRY_SUFFIX:
                    path.unlink()
                    removed += 1
                elif path.name.endswith(TEMP_SUFFIX):
                    path.unlink()
            except FileNotFoundError:
                continue

        logger.info(f"Invalidated {removed} cache entries in {self.cache_dir}")
        return removed
