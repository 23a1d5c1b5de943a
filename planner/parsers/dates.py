# planner/parsers/dates.py
import re
from datetime import date, datetime, time, timezone
from typing import Optional, Union

# ---------------------
# Accepted input formats
# ---------------------
ISO_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$", re.ASCII)   # 2024-03-15
US_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$", re.ASCII)    # 03/15/2024

DISPLAY_FMT = "%m/%d/%Y"


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """Parse YYYY-MM-DD or MM/DD/YYYY into a date. Returns None if neither matches
    or the calendar date does not exist (e.g. 2024-02-30)."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value).strip()
    if not s:
        return None

    m = ISO_RE.match(s)
    if m:
        y, mon, d = int(m.group(1)), int(m.group(2)), int(m.group(3))
    else:
        m = US_RE.match(s)
        if not m:
            return None
        mon, d, y = int(m.group(1)), int(m.group(2)), int(m.group(3))

    try:
        return date(y, mon, d)
    except ValueError:
        return None


def epoch_ms(d: date) -> int:
    """Epoch milliseconds at UTC midnight of `d`."""
    return int(datetime.combine(d, time.min, tzinfo=timezone.utc).timestamp() * 1000)


def from_epoch_ms(ms: int) -> date:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).date()


def format_display(d: date) -> str:
    return d.strftime(DISPLAY_FMT)
