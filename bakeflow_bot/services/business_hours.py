"""
Business hours gate.

Customers can only start browsing products (or reorder) while the bakery is
open. Hours and timezone come from config.
"""

import logging
from datetime import datetime
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from ..config import (
    BUSINESS_HOURS_ENABLED,
    BUSINESS_OPEN_HOUR,
    BUSINESS_CLOSE_HOUR,
    BUSINESS_TIMEZONE,
)

logger = logging.getLogger(__name__)


class BusinessHours:
    """Opening window in the bakery's local time: open_hour <= hour < close_hour."""

    def __init__(
        self,
        open_hour: int = BUSINESS_OPEN_HOUR,
        close_hour: int = BUSINESS_CLOSE_HOUR,
        timezone: str = BUSINESS_TIMEZONE,
        enabled: bool = BUSINESS_HOURS_ENABLED,
        clock: Optional[Callable[[ZoneInfo], datetime]] = None,
    ):
        self.open_hour = open_hour
        self.close_hour = close_hour
        self.tz = ZoneInfo(timezone)
        self.enabled = enabled
        self._clock = clock or (lambda tz: datetime.now(tz))

    def is_open_now(self) -> bool:
        if not self.enabled:
            return True
        now = self._clock(self.tz)
        is_open = self.open_hour <= now.hour < self.close_hour
        if not is_open:
            logger.debug("Closed at %s (hours %d-%d)", now.isoformat(), self.open_hour, self.close_hour)
        return is_open

    def describe(self) -> str:
        """Human readable hours, e.g. '8:00 AM - 8:00 PM'."""
        return f"{_format_hour(self.open_hour)} - {_format_hour(self.close_hour)}"


def _format_hour(hour: int) -> str:
    suffix = "AM" if hour % 24 < 12 else "PM"
    display = hour % 12 or 12
    return f"{display}:00 {suffix}"
