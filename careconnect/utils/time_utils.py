from datetime import datetime, timezone


def to_utc(dt: datetime) -> datetime:
    """Normalize a datetime to UTC, adding tzinfo if needed.

    Mongo hands datetimes back naive (they are stored as UTC).
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
