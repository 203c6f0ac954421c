"""Date manipulation utilities"""

import math
from datetime import date, datetime, time, timezone
from typing import List, Optional, Tuple

from mfi_backoffice.domain.exceptions import ValidationError

SECONDS_PER_DAY = 24 * 60 * 60


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how rows are stored"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def month_start(year: int, month: int) -> datetime:
    """First instant of a month; month may fall outside 1-12 and rolls over the year"""
    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    return datetime(year, month, 1)


def trailing_month_windows(now: datetime, months: int = 12) -> List[Tuple[str, datetime, datetime]]:
    """
    Half-open [start, next_start) windows for the trailing months ending with `now`'s month.

    Returns oldest first, labelled like "Oct 2026".
    """
    windows = []
    for offset in range(months - 1, -1, -1):
        start = month_start(now.year, now.month - offset)
        end = month_start(now.year, now.month - offset + 1)
        windows.append((start.strftime("%b %Y"), start, end))
    return windows


def elapsed_days_ceil(start: datetime, end: datetime) -> int:
    """Whole days between two timestamps, rounded up (same instant → 0)"""
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


def parse_date_bound(value: Optional[str], end_of_day: bool = False) -> Optional[datetime]:
    """
    Parse an ISO date or datetime query value into a naive UTC datetime.

    A bare date used as an upper bound covers the whole day so that
    `endDate=2026-03-31` includes applications created on the 31st.
    """
    if value is None or not str(value).strip():
        return None

    raw = str(value).strip()
    try:
        if len(raw) == 10:
            parsed_date = date.fromisoformat(raw)
            return datetime.combine(parsed_date, time.max if end_of_day else time.min)
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise ValidationError(f"Invalid date '{raw}'. Use ISO format, e.g. 2026-01-31")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
