"""Plain-text rendering of notifications and thread messages for the terminal."""

from __future__ import annotations

from datetime import datetime, timezone

from shopfloor_shared.schemas.notifications import NotificationRead
from shopfloor_shared.schemas.rush_orders import RushOrderMessageRead


def _ago(seconds: float) -> str:
    if seconds < 60:
        return "less than a minute ago"
    minutes = int(seconds // 60)
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    hours = minutes // 60
    return f"about {hours} hour{'s' if hours != 1 else ''} ago"


def format_timestamp(ts: datetime, now: datetime | None = None) -> str:
    """Relative time for today, otherwise 'Mon D, HH:MM'."""
    now = now or datetime.now(timezone.utc)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    local_ts = ts.astimezone(now.tzinfo)
    if local_ts.date() == now.date():
        return _ago(max(0.0, (now - local_ts).total_seconds()))
    return f"{local_ts:%b} {local_ts.day}, {local_ts:%H:%M}"


def initials(name: str | None) -> str:
    if not name:
        return "?"
    return "".join(part[0] for part in name.split() if part).upper()[:2]


def format_notification(n: NotificationRead, now: datetime | None = None) -> str:
    marker = " " if n.read else "*"
    return f"{marker} {n.message}  ({format_timestamp(n.created_at, now)})"


def format_message(m: RushOrderMessageRead, now: datetime | None = None) -> str:
    author = m.employee_name or "Unknown"
    role = f" [{m.employee_role}]" if m.employee_role else ""
    return f"{initials(m.employee_name)} {author}{role} {format_timestamp(m.created_at, now)}: {m.message}"
