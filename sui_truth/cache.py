"""
Profile Cache - Time-boxed memo of resolved profiles.

Expired entries are evicted lazily by the read that finds them, or in
bulk by prune_expired(). The cache never schedules its own sweeps.
Whitelisted and degraded profiles are refused at put().
"""

import logging
import threading
from typing import Optional

from sui_truth.clock import ClockProtocol, get_system_clock
from sui_truth.config import DEFAULT_CACHE_TTL_SECONDS
from sui_truth.models import AddressProfile, CacheEntry, CacheStats


logger = logging.getLogger(__name__)


class ProfileCache:
    """Keyed by normalized address. Safe for concurrent use."""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Optional[ClockProtocol] = None,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock or get_system_clock()
        self._lock = threading.Lock()
        self._entries: dict[str, CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, address: str) -> Optional[AddressProfile]:
        """Cached profile, or None if absent or expired (expired is evicted)."""
        with self._lock:
            entry = self._entries.get(address)
            if entry is None:
                self._misses += 1
                return None

            if entry.is_expired(self._clock.timestamp(), self._ttl):
                del self._entries[address]
                self._misses += 1
                logger.debug(f"[cache] Evicted expired entry for {address}")
                return None

            entry.hits += 1
            self._hits += 1
            return entry.profile

    def put(self, address: str, profile: AddressProfile) -> bool:
        """
        Store a profile, replacing any existing entry.

        Returns False without storing for whitelisted or degraded
        profiles.
        """
        if profile.is_whitelisted or profile.error is not None:
            return False

        with self._lock:
            self._entries[address] = CacheEntry(
                profile=profile,
                inserted_at=self._clock.timestamp(),
            )
        return True

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()
        logger.info("[cache] Cache cleared")

    def prune_expired(self) -> int:
        """Remove expired entries, return how many were removed."""
        with self._lock:
            now = self._clock.timestamp()
            expired = [
                key for key, entry in self._entries.items()
                if entry.is_expired(now, self._ttl)
            ]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.info(f"[cache] Pruned {len(expired)} expired entries")
        return len(expired)

    def stats(self) -> CacheStats:
        """Counts of valid and expired entries, without evicting."""
        with self._lock:
            now = self._clock.timestamp()
            expired = sum(
                1 for entry in self._entries.values()
                if entry.is_expired(now, self._ttl)
            )
            total = len(self._entries)
        return CacheStats(total=total, valid=total - expired, expired=expired)

    def hit_rate(self) -> float:
        """Percentage of get() calls served from cache."""
        total = self._hits + self._misses
        return round(self._hits / total * 100, 2) if total else 0.0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, address: str) -> bool:
        """Unexpired entry present. Does not evict or count as a read."""
        with self._lock:
            entry = self._entries.get(address)
            return entry is not None and not entry.is_expired(
                self._clock.timestamp(), self._ttl
            )
