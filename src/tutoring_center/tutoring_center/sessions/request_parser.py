"""Turn a JSON body into a CreateSessionRequest."""

from __future__ import annotations

from typing import Any, Optional

from ..common.datetime_utils import parse_iso_instant
from ..common.validators import optional_str, require_non_empty
from ..core.enums import SessionType
from ..core.exceptions import InvalidRequest
from .model import CreateSessionRequest

ALLOWED_FIELDS = frozenset(
    {
        "centerId",
        "tutorId",
        "sessionType",
        "startAt",
        "endAt",
        "timezone",
        "studentId",
        "groupId",
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


def _instant(body: dict, key: str):
    value = require_non_empty(_text(body, key), key)
    try:
        return parse_iso_instant(value)
    except ValueError:
        raise InvalidRequest(f"{key} must be an ISO-8601 timestamp with offset")


def parse_create_session_request(body: Any) -> CreateSessionRequest:
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

    return CreateSessionRequest(
        center_id=require_non_empty(_text(body, "centerId"), "centerId"),
        tutor_id=require_non_empty(_text(body, "tutorId"), "tutorId"),
        session_type=session_type,
        start_at_utc=_instant(body, "startAt"),
        end_at_utc=_instant(body, "endAt"),
        timezone=require_non_empty(_text(body, "timezone"), "timezone"),
        student_id=optional_str(_text(body, "studentId")),
        group_id=optional_str(_text(body, "groupId")),
        zoom_link=_text(body, "zoomLink"),
    )
