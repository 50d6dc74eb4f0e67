from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class Listing:
    id: str
    summary: Optional[str] = None
    application_period: Optional[str] = None  # free text, source of the deadline
    training_period: Optional[str] = None
    target: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ExtractedNotice:
    summary: str = ""
    application_period: str = ""
    training_period: str = ""
    target: str = ""


@dataclass(frozen=True)
class SweepPlan:
    ids_to_delete: List[str] = field(default_factory=list)
    should_update_marker: bool = False


@dataclass(frozen=True)
class DeleteResult:
    listing_id: str
    ok: bool
    error: Optional[str] = None


@dataclass(frozen=True)
class Notice:
    message: str
    kind: str = "info"  # info | error

    @property
    def is_error(self) -> bool:
        return self.kind == "error"
