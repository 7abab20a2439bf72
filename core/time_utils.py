from datetime import datetime, timedelta, timezone


def now_utc() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime | None) -> datetime | None:
    """Treat naive datetimes (SQLite drops tzinfo) as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def time_since(dt: datetime, now: datetime | None = None) -> timedelta:
    """Return the timedelta between now (UTC) and the provided datetime."""
    return (now or now_utc()) - ensure_aware(dt)


def format_elapsed(delta: timedelta) -> str:
    """Render a duration as e.g. '1h 05m' or '12m'."""
    total_minutes = max(int(delta.total_seconds() // 60), 0)
    hours, minutes = divmod(total_minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"
