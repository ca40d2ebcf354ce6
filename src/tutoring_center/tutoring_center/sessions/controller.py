from __future__ import annotations

import logging
from datetime import datetime, time, timedelta, timezone

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_utc, parse_iso_date, to_iso_z
from ..common.validators import optional_str
from ..container import Container
from ..core.constants import DEFAULT_LIST_DAYS
from ..core.exceptions import DuplicateSessionError, ValidationError
from .model import Session
from .request_parser import parse_create_session_request

logger = logging.getLogger(__name__)


def _to_dict(s: Session) -> dict:
    return {
        "id": s.session_id,
        "centerId": s.center_id,
        "tutorId": s.tutor_id,
        "sessionType": s.session_type.value,
        "groupId": s.group_id,
        "startAt": to_iso_z(s.start_at_utc),
        "endAt": to_iso_z(s.end_at_utc),
        "timezone": s.timezone,
        "zoomLink": s.zoom_link,
        "studentIds": list(s.student_ids),
    }


def register(app: Flask, container: Container) -> None:
    def _utc_midnight(value: str) -> datetime:
        return datetime.combine(parse_iso_date(value), time.min, tzinfo=timezone.utc)

    @app.route("/api/sessions", methods=["GET"], endpoint="sessions_list")
    def sessions_list():
        today = now_utc().date().strftime("%Y-%m-%d")
        try:
            from_utc = _utc_midnight(request.args.get("from") or today)
            # "to" is an inclusive calendar date.
            to_s = request.args.get("to")
            to_utc = _utc_midnight(to_s) + timedelta(days=1) if to_s else from_utc + timedelta(days=DEFAULT_LIST_DAYS)
        except ValueError:
            return jsonify({"error": "ValidationError", "details": "from/to must be YYYY-MM-DD"}), 400

        if to_utc <= from_utc:
            return jsonify({"error": "ValidationError", "details": "to must be on or after from"}), 400

        try:
            sessions = container.sessions_repo.list_range(
                from_utc=from_utc,
                to_utc=to_utc,
                center_id=optional_str(request.args.get("centerId")),
                tutor_id=optional_str(request.args.get("tutorId")),
            )
        except Exception:
            logger.exception("GET /api/sessions failed")
            return jsonify({"error": "InternalError"}), 500

        return jsonify({"items": [_to_dict(s) for s in sessions]})

    @app.route("/api/sessions", methods=["POST"], endpoint="sessions_create")
    def sessions_create():
        try:
            create_request = parse_create_session_request(request.get_json(silent=True))
            session = container.session_service.create_one(create_request)
        except ValidationError as e:
            return jsonify({"error": "ValidationError", "details": str(e)}), 400
        except DuplicateSessionError:
            return jsonify({"error": "Conflict", "details": "Session already exists for this tutor and time"}), 409
        except Exception:
            logger.exception("POST /api/sessions failed")
            return jsonify({"error": "InternalError"}), 500

        return jsonify({"session": _to_dict(session), "rosterCount": len(session.student_ids)}), 201
