# app/services/access_gate.py
"""
Service window: the lookup feature is only usable
  - from the 1st to the 20th of the month,
  - Monday to Friday,
  - between 08:00 and 18:00 local time (18:00 itself is closed),
  - on days that are not public holidays.

is_service_open() is a pure function of the clock. ServiceWindowMonitor keeps
the last evaluated state and is refreshed once a minute by watch_service_window()
and on every lookup request.
"""

import asyncio
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from app.config import settings
from app.utils.holidays import PUBLIC_HOLIDAYS
from app.utils.logger import get_logger

logger = get_logger(__name__)


def local_now() -> datetime:
    return datetime.now(ZoneInfo(settings.TIMEZONE))


def is_service_open(now: datetime, holidays=PUBLIC_HOLIDAYS) -> bool:
    if now.day > settings.SERVICE_LAST_DAY_OF_MONTH:
        return False
    if now.weekday() >= 5:  # Saturday / Sunday
        return False
    if not (settings.SERVICE_OPEN_HOUR <= now.hour < settings.SERVICE_CLOSE_HOUR):
        return False
    if now.strftime("%Y-%m-%d") in holidays:
        return False
    return True


class ServiceWindowMonitor:
    def __init__(self, clock: Callable[[], datetime] = local_now):
        self.clock = clock
        self.is_open: Optional[bool] = None

    def refresh(self) -> bool:
        is_open = is_service_open(self.clock())
        if is_open != self.is_open:
            if self.is_open is not None:
                logger.info(f"Service window {'opened' if is_open else 'closed'}")
            self.is_open = is_open
        return is_open


service_window = ServiceWindowMonitor()


async def watch_service_window(monitor: ServiceWindowMonitor = service_window,
                               interval: Optional[int] = None):
    """Re-evaluate the window forever. Started as a background task at startup."""
    interval = interval or settings.GATE_CHECK_INTERVAL_SECONDS
    while True:
        monitor.refresh()
        await asyncio.sleep(interval)
