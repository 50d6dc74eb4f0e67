# tests/conftest.py
from datetime import datetime, timedelta, timezone
from typing import Optional
import pytest
from src.domain.models import Listing

NOW = datetime(2024, 6, 15, 12, 0, 0)


def period_ending(days: int) -> str:
    """Application period whose last day is `days` away from NOW."""
    end = NOW + timedelta(days=days)
    return f"2024.01.01 ~ {end:%Y.%m.%d}"


def make_listing(
    id: str,
    days: Optional[int] = None,
    target: Optional[str] = "Teachers",
    summary: Optional[str] = None,
    created_minute: int = 0,
) -> Listing:
    return Listing(
        id=id,
        summary=summary or f"Course {id}",
        application_period=period_ending(days) if days is not None else None,
        training_period="2024.07.01 ~ 2024.07.05",
        target=target,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=created_minute),
    )


@pytest.fixture
def now() -> datetime:
    return NOW
