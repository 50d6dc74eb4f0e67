from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from .deadline import parse_deadline
from .models import Listing

ALL_TARGETS = "all"
FALLBACK_TARGET = "Other"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def group_key(listing: Listing) -> str:
    return listing.target or FALLBACK_TARGET


def is_past(listing: Listing, now: datetime) -> bool:
    deadline = parse_deadline(listing.application_period)
    return deadline is not None and deadline < now


def unique_targets(listings: List[Listing]) -> List[str]:
    """Filter choices: 'all' first, then each group key in first-seen order."""
    targets: List[str] = [ALL_TARGETS]
    for l in listings:
        key = group_key(l)
        if key not in targets:
            targets.append(key)
    return targets


def _matches(listing: Listing, filter_target: str, term: str) -> bool:
    if filter_target != ALL_TARGETS and listing.target != filter_target:
        return False
    if not term:
        return True
    return any(isinstance(value, str) and term in value.lower() for value in (listing.summary, listing.target))


def _created_ts(listing: Listing) -> float:
    created = listing.created_at or _EPOCH
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.timestamp()


def _sort_key(listing: Listing, now: datetime) -> Tuple[int, int, float]:
    deadline: Optional[datetime] = parse_deadline(listing.application_period)
    if deadline is None:
        # undated: after the dated active ones, newest upload first
        return (0, 1, -_created_ts(listing))
    if deadline < now:
        return (1, 0, -deadline.timestamp())
    return (0, 0, deadline.timestamp())


def classify(
    listings: List[Listing],
    now: datetime,
    filter_target: str = ALL_TARGETS,
    search_term: str = "",
) -> Dict[str, List[Listing]]:
    """Filter, order and group listings for display.

    Active listings come first (soonest deadline first, then undated ones by
    newest upload), expired ones last (most recently closed first). Groups keep
    the order in which their key first appears in the sorted sequence.
    """
    term = (search_term or "").lower()
    filtered = [l for l in listings if _matches(l, filter_target, term)]
    ordered = sorted(filtered, key=lambda l: _sort_key(l, now))

    groups: Dict[str, List[Listing]] = {}
    for l in ordered:
        groups.setdefault(group_key(l), []).append(l)
    return groups
