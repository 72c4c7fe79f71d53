"""Date manipulation utilities"""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, treating naive values as UTC"""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_same_month(moment: datetime, reference: datetime) -> bool:
    return moment.year == reference.year and moment.month == reference.month


def is_previous_month(moment: datetime, reference: datetime) -> bool:
    """True when moment falls in the calendar month before reference (handles January)"""
    if reference.month == 1:
        return moment.year == reference.year - 1 and moment.month == 12
    return moment.year == reference.year and moment.month == reference.month - 1


def shift_month(reference: datetime, months: int) -> tuple[int, int]:
    """(year, month) of the calendar month `months` away from reference; negative goes back"""
    index = reference.year * 12 + (reference.month - 1) + months
    return index // 12, index % 12 + 1
