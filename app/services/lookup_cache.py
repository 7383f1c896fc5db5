# app/services/lookup_cache.py
"""
Lookup result cache and per-user recent searches.

Entries are {"data": <customer dict>, "timestamp": <epoch seconds>} under
"qs_cache_v1_<installation number>". Expiry is checked lazily on read, and
every write also drops entries that have already expired.
"""

import os
import time
from typing import Callable, Optional

from pydantic import ValidationError

from app.config import settings
from app.schemas.customer import Customer
from app.services.local_state import JsonStateStore
from app.utils.logger import get_logger

logger = get_logger(__name__)

CACHE_PREFIX = "qs_cache_v1_"
RECENT_PREFIX = "recent_searches_"


class LookupCache:
    def __init__(self, state: JsonStateStore, ttl_seconds: Optional[int] = None,
                 clock: Callable[[], float] = time.time):
        self.state = state
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.CACHE_TTL_SECONDS
        self.clock = clock

    def get(self, installation_number: str) -> Optional[Customer]:
        key = CACHE_PREFIX + installation_number
        record = self.state.get(key)
        if not record:
            return None
        try:
            if self._expired(record, self.clock()):
                self.state.remove(key)
                return None
            return Customer(**record["data"])
        except (KeyError, TypeError, ValueError, ValidationError):
            logger.warning(f"Dropping corrupt cache entry for {installation_number}")
            self.state.remove(key)
            return None

    def put(self, installation_number: str, customer: Customer):
        now = self.clock()
        self.prune(now)
        self.state.set(CACHE_PREFIX + installation_number,
                       {"data": customer.model_dump(), "timestamp": now})

    def prune(self, now: Optional[float] = None) -> int:
        """Drop every expired or unreadable entry. Returns how many were dropped."""
        now = self.clock() if now is None else now
        stale = []
        for key in self.state.keys(CACHE_PREFIX):
            try:
                if self._expired(self.state.get(key), now):
                    stale.append(key)
            except (KeyError, TypeError, ValueError):
                stale.append(key)
        if stale:
            self.state.remove_many(stale)
            logger.debug(f"Pruned {len(stale)} expired cache entries")
        return len(stale)

    def _expired(self, record: dict, now: float) -> bool:
        return now - float(record["timestamp"]) > self.ttl_seconds


class RecentSearches:
    """Most-recent-first, deduplicated, capped list per username."""

    def __init__(self, state: JsonStateStore, limit: Optional[int] = None):
        self.state = state
        self.limit = limit or settings.RECENT_SEARCHES_LIMIT

    def items(self, username: str) -> list[str]:
        return list(self.state.get(RECENT_PREFIX + username, []))

    def add(self, username: str, term: str) -> list[str]:
        updated = [term] + [s for s in self.items(username) if s != term]
        updated = updated[: self.limit]
        self.state.set(RECENT_PREFIX + username, updated)
        return updated

    def clear(self, username: str):
        self.state.remove(RECENT_PREFIX + username)


server_state = JsonStateStore(os.path.join(settings.STATE_DIR, "server_state.json"))
lookup_cache = LookupCache(server_state)
recent_searches = RecentSearches(server_state)
