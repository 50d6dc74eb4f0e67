import re
from datetime import datetime
from typing import Optional

_NOISE = re.compile(r"[^0-9.~-]")
_DATE = re.compile(r"(\d{2,4})[.-]?(\d{1,2})[.-]?(\d{1,2})")


def parse_deadline(text: Optional[str]) -> Optional[datetime]:
    """Return the end-of-day deadline for a loose date range, or None.

    Everything except digits, '.', '-' and '~' is dropped first, so prose and
    Korean text around the dates are ignored. With a range ("a ~ b") only the
    part after the last '~' counts. Never raises.
    """
    if not text or not isinstance(text, str):
        return None

    cleaned = _NOISE.sub("", text)
    fragment = cleaned.split("~")[-1].strip()

    match = _DATE.search(fragment)
    if not match:
        return None

    year, month, day = match.groups()
    if len(year) == 2:
        year = f"20{year}"
    if len(year) != 4:
        return None

    try:
        return datetime(int(year), int(month.zfill(2)), int(day.zfill(2)), 23, 59, 59)
    except ValueError:
        return None
