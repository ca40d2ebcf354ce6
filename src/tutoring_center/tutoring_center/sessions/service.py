from __future__ import annotations

import logging
from typing import Optional

from ..centers.model import Center
from ..centers.repository import CenterRepository
from ..common.datetime_utils import resolve_zone
from ..core.enums import SessionType
from ..core.exceptions import InvalidRequest
from ..generation.zoom_link import normalize_zoom_link
from ..groups.repository import GroupRepository
from .model import CreateSessionRequest, NewSession, Session
from .repository import SessionRepository

logger = logging.getLogger(__name__)


def check_participants(session_type: SessionType, *, student_id: Optional[str], group_id: Optional[str]) -> None:
    """One-on-one sessions name a student; group and class sessions name a group."""
    if session_type == SessionType.ONE_ON_ONE:
        if not student_id:
            raise InvalidRequest("studentId is required")
        if group_id:
            raise InvalidRequest("groupId is not allowed")
    else:
        if not group_id:
            raise InvalidRequest("groupId is required")
        if student_id:
            raise InvalidRequest("studentId is not allowed")


def require_center(centers: CenterRepository, center_id: str) -> Center:
    center = centers.get_by_id(center_id)
    if not center:
        raise InvalidRequest("Center not found")
    return center


def resolve_roster(
    groups: Optional[GroupRepository],
    *,
    center_id: str,
    session_type: SessionType,
    student_id: Optional[str],
    group_id: Optional[str],
) -> tuple[str, ...]:
    """Students attached to a new session: the one student, or the group's current roster."""
    if session_type == SessionType.ONE_ON_ONE:
        return (str(student_id),)

    if groups is None:
        raise InvalidRequest("Group sessions are not supported")

    group = groups.get_by_id(str(group_id))
    if not group:
        raise InvalidRequest("Group not found")
    if group.center_id != center_id:
        raise InvalidRequest("Group does not belong to center")
    if group.group_type != session_type:
        raise InvalidRequest(f"Group type must be {session_type.value}")

    return tuple(groups.list_student_ids(group.group_id))


class SessionService:
    def __init__(
        self,
        sessions: SessionRepository,
        centers: CenterRepository,
        groups: Optional[GroupRepository] = None,
    ):
        self._sessions = sessions
        self._centers = centers
        self._groups = groups

    def create_one(self, request: CreateSessionRequest) -> Session:
        """Create a single session.

        Raises InvalidRequest before anything is read when the request is
        malformed; a taken (center, tutor, start, end) slot surfaces as
        DuplicateSessionError from the repository.
        """
        if request.end_at_utc <= request.start_at_utc:
            raise InvalidRequest("endAt must be after startAt")
        resolve_zone(request.timezone)
        check_participants(request.session_type, student_id=request.student_id, group_id=request.group_id)
        zoom_link = normalize_zoom_link(request.zoom_link)

        require_center(self._centers, request.center_id)
        student_ids = resolve_roster(
            self._groups,
            center_id=request.center_id,
            session_type=request.session_type,
            student_id=request.student_id,
            group_id=request.group_id,
        )

        session = self._sessions.create(
            NewSession(
                center_id=request.center_id,
                tutor_id=request.tutor_id,
                session_type=request.session_type,
                start_at_utc=request.start_at_utc,
                end_at_utc=request.end_at_utc,
                timezone=request.timezone.strip(),
                group_id=request.group_id,
                zoom_link=zoom_link,
                student_ids=student_ids,
            )
        )
        logger.info(
            "session created id=%s center=%s tutor=%s roster=%s",
            session.session_id,
            session.center_id,
            session.tutor_id,
            len(session.student_ids),
        )
        return session
