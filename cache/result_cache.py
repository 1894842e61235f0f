"""
Two-tier result cache: a bounded in-memory dict in front of one JSON file per
key on disk. Both tiers share a TTL; a record is fresh while
`now - cached_at <= ttl_seconds`.

File layout: {cache_dir}/{name}_{safe_key}.json holding
{"payload": <encoded value>, "cached_at": <epoch seconds>}.
"""
from __future__ import annotations

import json
import logging
import re
import threading
import time
from pathlib import Path
from typing import Any, Callable, Generic, Optional, TypeVar

from config import CACHE_DIR, MEMORY_CACHE_MAX_ENTRIES
from models import CacheEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_UNSAFE_RE = re.compile(r"[^A-Za-z0-9]")

# Errors a decode function raises on a structurally wrong payload
_DECODE_ERRORS = (KeyError, TypeError, ValueError, AttributeError)


def safe_key(key: str) -> str:
    return _UNSAFE_RE.sub("_", _SCHEME_RE.sub("", key))


def _to_payload(value: Any) -> Any:
    return value.to_dict() if hasattr(value, "to_dict") else value


class ResultCache(Generic[T]):
    """
    Memoizes values of one kind (site reports, sitemap URL lists) by key.

    `decode` turns a stored payload back into a value and raises on a
    malformed one. With `purge_expired_on_read` an expired file is deleted
    when read; otherwise it is left in place and simply ignored.
    """

    def __init__(
        self,
        name: str,
        ttl_seconds: float,
        max_entries: int = MEMORY_CACHE_MAX_ENTRIES,
        cache_dir: str = CACHE_DIR,
        decode: Callable[[Any], T] = lambda payload: payload,
        encode: Callable[[T], Any] = _to_payload,
        purge_expired_on_read: bool = False,
        clock: Callable[[], float] = time.time,
    ):
        self.name = name
        self.ttl_seconds = ttl_seconds
        self.max_entries = max(max_entries, 1)
        self.cache_dir = Path(cache_dir)
        self.decode = decode
        self.encode = encode
        self.purge_expired_on_read = purge_expired_on_read
        self.clock = clock

        self._memory: dict[str, CacheEntry] = {}
        self._memory_lock = threading.Lock()
        self._file_lock = threading.Lock()

        # OSError propagates: a cache that cannot persist is a setup error
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    # ── Public API ────────────────────────────────────────────────────────────

    def get(self, key: str) -> Optional[T]:
        now = self.clock()

        with self._memory_lock:
            entry = self._memory.get(key)
            if entry is not None:
                if self._is_fresh(entry.cached_at, now):
                    return entry.payload
                del self._memory[key]

        entry = self._read_file(key, now)
        if entry is None:
            return None

        with self._memory_lock:
            self._admit(key, entry)
        return entry.payload

    def put(self, key: str, value: T) -> None:
        entry = CacheEntry(payload=value, cached_at=self.clock())
        with self._memory_lock:
            self._admit(key, entry)
        self._write_file(key, entry)

    def invalidate(self, key: str) -> None:
        with self._memory_lock:
            self._memory.pop(key, None)
        with self._file_lock:
            self._unlink(self.path_for(key))

    def clear_memory(self) -> None:
        with self._memory_lock:
            self._memory.clear()

    def path_for(self, key: str) -> Path:
        return self.cache_dir / f"{self.name}_{safe_key(key)}.json"

    def __len__(self) -> int:
        with self._memory_lock:
            return len(self._memory)

    # ── Memory tier ───────────────────────────────────────────────────────────

    def _is_fresh(self, cached_at: float, now: float) -> bool:
        return now - cached_at <= self.ttl_seconds

    def _admit(self, key: str, entry: CacheEntry) -> None:
        """Caller holds the memory lock."""
        if key not in self._memory and len(self._memory) >= self.max_entries:
            oldest = min(self._memory, key=lambda k: self._memory[k].cached_at)
            del self._memory[oldest]
        self._memory[key] = entry

    # ── File tier ─────────────────────────────────────────────────────────────

    def _read_file(self, key: str, now: float) -> Optional[CacheEntry]:
        path = self.path_for(key)
        with self._file_lock:
            try:
                raw = path.read_text(encoding="utf-8")
            except FileNotFoundError:
                return None
            except OSError as exc:
                logger.warning("Could not read cache file %s: %s", path, exc)
                return None

            try:
                record = json.loads(raw)
                cached_at = float(record["cached_at"])
                payload = record["payload"]
            except (ValueError, KeyError, TypeError) as exc:
                logger.warning("Corrupt cache file %s (%s), removing", path, exc)
                self._unlink(path)
                return None

            if not self._is_fresh(cached_at, now):
                if self.purge_expired_on_read:
                    logger.debug("Expired cache file %s, removing", path)
                    self._unlink(path)
                return None

            try:
                value = self.decode(payload)
            except _DECODE_ERRORS as exc:
                logger.warning("Invalid cached payload in %s (%s), removing", path, exc)
                self._unlink(path)
                return None

        return CacheEntry(payload=value, cached_at=cached_at)

    def _write_file(self, key: str, entry: CacheEntry) -> None:
        path = self.path_for(key)
        record = {"payload": self.encode(entry.payload), "cached_at": entry.cached_at}
        with self._file_lock:
            try:
                path.write_text(json.dumps(record), encoding="utf-8")
            except (OSError, TypeError, ValueError) as exc:
                logger.warning("Could not write cache file %s: %s", path, exc)

    @staticmethod
    def _unlink(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Could not remove cache file %s: %s", path, exc)
