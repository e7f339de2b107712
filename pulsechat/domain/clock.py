# pulsechat/domain/clock.py
from datetime import UTC, datetime, timedelta


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    # sqlite hands back naive datetimes; everything is stored in UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def is_within(value: datetime | None, window: timedelta, now: datetime | None = None) -> bool:
    if value is None:
        return False
    now = now or utcnow()
    return now - as_utc(value) < window
