from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional, Union

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Union[str, date, None], field_name: str = "Date") -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return parse_iso_date(value.strip()[:10])
    except ValueError:
        raise ValidationError(f"{field_name} must use the YYYY-MM-DD format")


def parse_timestamp(value: Union[str, datetime, None]) -> Optional[datetime]:
    """Parse a timestamp column as returned by the data API."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = value.strip().replace(" ", "T", 1)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)
