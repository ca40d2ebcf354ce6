"""Occurrence expansion for recurring session generation.

Everything here is pure: the same request always yields the same occurrences,
and nothing touches the database.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Sequence
from zoneinfo import ZoneInfo

from ..common.datetime_utils import local_to_utc, resolve_zone
from ..core.exceptions import InvalidRequest
from .model import DateRange, GenerationRequest, Occurrence


def validate_request(request: GenerationRequest) -> ZoneInfo:
    """Check the recurrence parameters and return the resolved timezone."""
    zone = resolve_zone(request.timezone)

    if request.end_date < request.start_date:
        raise InvalidRequest("endDate must be on or after startDate")

    if not request.weekdays:
        raise InvalidRequest("weekdays must not be empty")
    bad = sorted(d for d in request.weekdays if not isinstance(d, int) or isinstance(d, bool) or not 1 <= d <= 7)
    if bad:
        raise InvalidRequest(f"weekdays must be between 1 (Mon) and 7 (Sun): {bad}")

    if request.end_time <= request.start_time:
        raise InvalidRequest("endTime must be after startTime")

    return zone


def wall_clock_duration(request: GenerationRequest) -> timedelta:
    anchor = date(2000, 1, 1)
    return datetime.combine(anchor, request.end_time) - datetime.combine(anchor, request.start_time)


def expand(request: GenerationRequest, *, zone: Optional[ZoneInfo] = None) -> list[Occurrence]:
    """Concrete occurrences of the weekly pattern, ascending by local date.

    Weekdays use the ISO convention: 1=Mon ... 7=Sun. Each start is converted with
    the zone's offset on its own date; the end is start + requested duration so
    occurrences on DST transition days keep their length. A `zone` from
    validate_request() skips re-validation.
    """
    if zone is None:
        zone = validate_request(request)
    duration = wall_clock_duration(request)

    occurrences: list[Occurrence] = []
    day = request.start_date
    while day <= request.end_date:
        if day.isoweekday() in request.weekdays:
            start_at = local_to_utc(day, request.start_time, zone)
            occurrences.append(Occurrence(local_date=day, start_at_utc=start_at, end_at_utc=start_at + duration))
        day += timedelta(days=1)

    return occurrences


def fetch_window(request: GenerationRequest, *, zone: Optional[ZoneInfo] = None) -> DateRange:
    """Existing-session lookup window: local midnight of startDate to local midnight after endDate.

    Depends only on the request, so preview and commit always read the same slice.
    """
    zone = zone or resolve_zone(request.timezone)
    return DateRange(
        from_utc=local_to_utc(request.start_date, datetime.min.time(), zone),
        to_utc=local_to_utc(request.end_date + timedelta(days=1), datetime.min.time(), zone),
    )


def occurrence_range(
    request: GenerationRequest,
    occurrences: Sequence[Occurrence],
    *,
    zone: Optional[ZoneInfo] = None,
) -> DateRange:
    if occurrences:
        return DateRange(from_utc=occurrences[0].start_at_utc, to_utc=occurrences[-1].end_at_utc)

    zone = zone or resolve_zone(request.timezone)
    return DateRange(
        from_utc=local_to_utc(request.start_date, request.start_time, zone),
        to_utc=local_to_utc(request.end_date, request.end_time, zone),
    )
