"""Turn a JSON body into a GenerationRequest.

Only shape and type checks live here; the recurrence rules (date order,
time order, timezone) are checked by the expander.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..common.validators import optional_str, require_non_empty
from ..core.enums import SessionType
from ..core.exceptions import InvalidRequest
from .model import GenerationRequest

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$")

ALLOWED_FIELDS = frozenset(
    {
        "centerId",
        "tutorId",
        "sessionType",
        "studentId",
        "groupId",
        "startDate",
        "endDate",
        "weekdays",
        "startTime",
        "endTime",
        "timezone",
        "zoomLink",
    }
)


def _text(body: dict, key: str) -> Optional[str]:
    value = body.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidRequest(f"{key} must be a string")
    return value


def _date(body: dict, key: str):
    value = require_non_empty(_text(body, key), key)
    if not DATE_RE.match(value):
        raise InvalidRequest(f"{key} must be YYYY-MM-DD")
    try:
        return parse_iso_date(value)
    except ValueError:
        raise InvalidRequest(f"{key} is not a valid date")


def _time(body: dict, key: str):
    value = require_non_empty(_text(body, key), key)
    if not TIME_RE.match(value):
        raise InvalidRequest(f"{key} must be HH:MM")
    return parse_hhmm(value)


def _weekdays(body: dict) -> frozenset[int]:
    raw = body.get("weekdays")
    if not isinstance(raw, list) or not raw:
        raise InvalidRequest("weekdays must be a non-empty list")

    out: set[int] = set()
    for v in raw:
        if isinstance(v, bool) or not isinstance(v, int) or not 1 <= v <= 7:
            raise InvalidRequest("weekdays must contain integers 1..7")
        out.add(v)
    return frozenset(out)


def parse_generation_request(body: Any) -> GenerationRequest:
    if not isinstance(body, dict):
        raise InvalidRequest("Invalid JSON body")

    unknown = sorted(set(body) - ALLOWED_FIELDS)
    if unknown:
        raise InvalidRequest(f"Unknown fields: {', '.join(unknown)}")

    session_type_s = require_non_empty(_text(body, "sessionType"), "sessionType")
    try:
        session_type = SessionType(session_type_s)
    except ValueError:
        raise InvalidRequest("sessionType must be ONE_ON_ONE, GROUP or CLASS")

    zoom_link = body.get("zoomLink")
    if zoom_link is not None and not isinstance(zoom_link, str):
        raise InvalidRequest("zoomLink must be a string")

    return GenerationRequest(
        center_id=require_non_empty(_text(body, "centerId"), "centerId"),
        tutor_id=require_non_empty(_text(body, "tutorId"), "tutorId"),
        session_type=session_type,
        student_id=optional_str(_text(body, "studentId")),
        group_id=optional_str(_text(body, "groupId")),
        start_date=_date(body, "startDate"),
        end_date=_date(body, "endDate"),
        weekdays=_weekdays(body),
        start_time=_time(body, "startTime"),
        end_time=_time(body, "endTime"),
        timezone=require_non_empty(_text(body, "timezone"), "timezone"),
        zoom_link=zoom_link,
    )
