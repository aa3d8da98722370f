"""In-memory TTL cache of parsed report records."""
from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from .config import load_settings
from .models import ReportRecord

logger = logging.getLogger(__name__)

BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def hash_text(text: str) -> str:
    """Fast 32-bit ``h * 31 + c`` rolling hash, suffixed with the text length."""

    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value & 0x80000000:
        value -= 0x100000000
    return f"{_to_base36(abs(value))}:{len(text)}"


@dataclass(frozen=True)
class CacheEntry:
    text: str
    record: ReportRecord
    stored_at: float


class ReportCache:
    """
    Bounded parse-result cache with:
    - fixed TTL measured from store time
    - eviction of expired entries first, then the oldest stored
    - one lock around lookups and the evict-then-insert sequence
    """

    def __init__(
        self,
        ttl_seconds: float = 300,
        max_entries: int = 50,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max(max_entries, 0)
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, CacheEntry] = {}

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.stored_at >= self.ttl_seconds

    def _evict_unlocked(self, now: float) -> None:
        while len(self._entries) > self.max_entries:
            expired = [key for key, entry in self._entries.items() if self._expired(entry, now)]
            if expired:
                for key in expired:
                    del self._entries[key]
                logger.debug("Evicted %d expired cache entries", len(expired))
                continue
            oldest = min(self._entries, key=lambda key: self._entries[key].stored_at)
            del self._entries[oldest]
            logger.debug("Evicted oldest cache entry %s", oldest)

    def get(self, text: str) -> ReportRecord | None:
        key = hash_text(text)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.text != text:
                return None
            if self._expired(entry, self._clock()):
                del self._entries[key]
                logger.debug("Cache entry %s expired", key)
                return None
        logger.info("Cache hit for %s", key)
        return entry.record

    def put(self, text: str, record: ReportRecord) -> None:
        key = hash_text(text)
        with self._lock:
            now = self._clock()
            self._entries.pop(key, None)
            self._entries[key] = CacheEntry(text, record, now)
            self._evict_unlocked(now)
        logger.info("Cached record %s", key)

    def sweep_expired(self) -> int:
        """Delete expired entries and return how many were removed."""

        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._entries.items() if self._expired(entry, now)]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, text: object) -> bool:
        if not isinstance(text, str):
            return False
        with self._lock:
            entry = self._entries.get(hash_text(text))
            return entry is not None and entry.text == text


def build_default_cache() -> ReportCache:
    settings = load_settings()
    return ReportCache(settings.cache_ttl_seconds, settings.cache_max_entries)


DEFAULT_CACHE = build_default_cache()
