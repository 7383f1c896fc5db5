# app/services/stats_service.py
"""
Per-user activity statistics for the admin console.

Two sources produce the same UserActivityStat list:
  - UserStatsViewSource: the precomputed user_stats_view
  - SearchLogSource:     counts / max(created_at) over raw search_logs
The first source whose table is readable at call time wins.
"""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from app.config import settings
from app.database import RemoteStore
from app.errors import RemoteStoreError
from app.schemas.stats import NEVER_LOGGED_IN, UserActivityStat
from app.utils.logger import get_logger

logger = get_logger(__name__)

DISPLAY_FORMAT = "%d.%m.%Y %H:%M"


def parse_timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning(f"Unparseable timestamp in stats: {value!r}")
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=ZoneInfo("UTC"))
    return parsed


def format_last_login(value: Optional[datetime]) -> str:
    if value is None:
        return NEVER_LOGGED_IN
    return value.astimezone(ZoneInfo(settings.TIMEZONE)).strftime(DISPLAY_FORMAT)


class StatsSource:
    table: str = ""

    async def is_available(self, store: RemoteStore) -> bool:
        return await store.probe(self.table)

    async def fetch(self, store: RemoteStore) -> list[UserActivityStat]:
        raise NotImplementedError


class UserStatsViewSource(StatsSource):
    table = "user_stats_view"

    async def fetch(self, store: RemoteStore) -> list[UserActivityStat]:
        rows = await store.select(self.table)
        return [
            UserActivityStat(
                username=str(row["username"]),
                query_count=int(row.get("query_count") or 0),
                last_login=format_last_login(parse_timestamp(row.get("last_login"))),
            )
            for row in rows
        ]


class SearchLogSource(StatsSource):
    table = "search_logs"

    async def fetch(self, store: RemoteStore) -> list[UserActivityStat]:
        rows = await store.select(self.table, "username, created_at")
        counts: dict[str, int] = {}
        latest: dict[str, Optional[datetime]] = {}
        for row in rows:
            username = row.get("username")
            if not username:
                continue
            counts[username] = counts.get(username, 0) + 1
            ts = parse_timestamp(row.get("created_at"))
            if ts is not None and (latest.get(username) is None or ts > latest[username]):
                latest[username] = ts
            else:
                latest.setdefault(username, None)
        return [
            UserActivityStat(username=u, query_count=n, last_login=format_last_login(latest[u]))
            for u, n in counts.items()
        ]


STATS_SOURCES: list[StatsSource] = [UserStatsViewSource(), SearchLogSource()]


async def get_user_activity_stats(store: RemoteStore, sources: Optional[list[StatsSource]] = None) -> list[UserActivityStat]:
    for source in sources or STATS_SOURCES:
        if not await source.is_available(store):
            logger.warning(f"Stats source '{source.table}' unavailable, trying next")
            continue
        try:
            return await source.fetch(store)
        except RemoteStoreError as e:
            logger.warning(f"Stats source '{source.table}' failed: {e}")
    return []
