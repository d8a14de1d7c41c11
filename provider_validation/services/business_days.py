"""Business-day arithmetic for the call attempt rule."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

SATURDAY = 5
SUNDAY = 6


def has_business_day_elapsed(start: datetime, now: datetime, tz: str = "UTC") -> bool:
    """Return True if at least one business day lies between two instants.

    Steps forward from ``start`` one calendar day at a time, keeping the
    time of day, for as long as the step does not pass ``now``. Any step
    landing on a Monday to Friday counts. Weekdays are read in ``tz``.
    Holidays are not considered.
    """
    zone = ZoneInfo(tz)
    current = start.astimezone(zone) + timedelta(days=1)

    while current <= now:
        if current.weekday() not in (SATURDAY, SUNDAY):
            return True
        current = current + timedelta(days=1)

    return False
