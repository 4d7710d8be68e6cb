"""UTC helpers shared by services, the session store and template filters."""

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """
    Return `value` as an aware UTC datetime.

    SQLite hands back naive datetimes; everything is stored in UTC, so naive
    values are read as UTC rather than local time.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
