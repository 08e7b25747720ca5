from datetime import datetime, timedelta, timezone


def now_local() -> datetime:
    return datetime.now(timezone.utc).astimezone()


def iso_timestamp(moment: datetime | None = None) -> str:
    """ISO 8601 timestamp with offset, second precision (like `date -Is`)."""
    return (moment or now_local()).isoformat(timespec="seconds")


def archive_stamp(moment: datetime | None = None) -> str:
    """Timestamp used in backup archive names, e.g. 2024-05-01-134501."""
    return (moment or now_local()).strftime("%Y-%m-%d-%H%M%S")


def lookback_start(hours: int, moment: datetime | None = None) -> datetime:
    return (moment or now_local()) - timedelta(hours=hours)


def whole_seconds(started: float, ended: float) -> int:
    return max(0, int(ended - started))
