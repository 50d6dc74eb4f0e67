from datetime import datetime, timedelta
from typing import List, Optional
from .deadline import parse_deadline
from .models import Listing, SweepPlan

CLEANUP_INTERVAL = timedelta(hours=24)


def is_due(now: datetime, last_run: Optional[datetime], min_interval: timedelta = CLEANUP_INTERVAL) -> bool:
    return last_run is None or (now - last_run) > min_interval


def expired_ids(listings: List[Listing], now: datetime) -> List[str]:
    ids: List[str] = []
    for l in listings:
        deadline = parse_deadline(l.application_period)
        if deadline is not None and deadline < now:
            ids.append(l.id)
    return ids


def sweep(
    listings: List[Listing],
    now: datetime,
    last_run: Optional[datetime],
    min_interval: timedelta = CLEANUP_INTERVAL,
) -> SweepPlan:
    """Decide which listings to purge. A throttled run deletes nothing and keeps the marker."""
    if not is_due(now, last_run, min_interval):
        return SweepPlan(ids_to_delete=[], should_update_marker=False)
    return SweepPlan(ids_to_delete=expired_ids(listings, now), should_update_marker=True)


def parse_marker(value: Optional[str]) -> Optional[datetime]:
    """Marker values are epoch milliseconds; anything unreadable counts as never run."""
    if not value:
        return None
    try:
        return datetime.fromtimestamp(int(value) / 1000)
    except (ValueError, OverflowError, OSError):
        return None


def format_marker(when: datetime) -> str:
    return str(int(when.timestamp() * 1000))
