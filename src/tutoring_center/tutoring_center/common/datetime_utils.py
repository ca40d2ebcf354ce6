from __future__ import annotations

from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.exceptions import InvalidRequest


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_hhmm(value: str) -> time:
    """Parse HH:MM (24h) string into time."""
    return datetime.strptime(value, "%H:%M").time()


def parse_iso_instant(value: str) -> datetime:
    """Parse an ISO-8601 timestamp with an explicit offset (or Z) into an aware UTC datetime."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        raise ValueError("timestamp must carry an offset")
    return parsed.astimezone(timezone.utc)


def resolve_zone(name: str) -> ZoneInfo:
    """Look up an IANA timezone, raising InvalidRequest for unknown names."""
    name = (name or "").strip()
    if not name:
        raise InvalidRequest("Invalid timezone")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidRequest(f"Invalid timezone: {name}")


def local_to_utc(day: date, at: time, zone: ZoneInfo) -> datetime:
    """Convert a wall-clock time on a given day in `zone` to an aware UTC datetime.

    Uses the zone's offset on that day. A time inside a spring-forward gap comes
    out shifted forward by the gap; an ambiguous fall-back time resolves to the
    earlier instant (fold=0).
    """
    local = datetime.combine(day, at).replace(tzinfo=zone, fold=0)
    return local.astimezone(timezone.utc)


def to_iso_z(value: datetime) -> str:
    """Format an aware datetime as an ISO-8601 UTC string with millisecond precision."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def now_utc() -> datetime:
    """Current UTC time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)
