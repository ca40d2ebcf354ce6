from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import SessionType


@dataclass(frozen=True)
class Session:
    session_id: int
    center_id: str
    tutor_id: str
    session_type: SessionType
    start_at_utc: datetime
    end_at_utc: datetime
    timezone: str
    group_id: Optional[str] = None
    zoom_link: Optional[str] = None
    student_ids: tuple[str, ...] = ()

    def overlaps(self, start_at_utc: datetime, end_at_utc: datetime) -> bool:
        return start_at_utc < self.end_at_utc and end_at_utc > self.start_at_utc

    def same_slot(self, start_at_utc: datetime, end_at_utc: datetime) -> bool:
        return self.start_at_utc == start_at_utc and self.end_at_utc == end_at_utc


@dataclass(frozen=True)
class NewSession:
    """Insert payload for one generated session."""

    center_id: str
    tutor_id: str
    session_type: SessionType
    start_at_utc: datetime
    end_at_utc: datetime
    timezone: str
    group_id: Optional[str] = None
    zoom_link: Optional[str] = None
    student_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class CreateSessionRequest:
    """A single one-off session, with instants already resolved to UTC."""

    center_id: str
    tutor_id: str
    session_type: SessionType
    start_at_utc: datetime
    end_at_utc: datetime
    timezone: str
    student_id: Optional[str] = None
    group_id: Optional[str] = None
    zoom_link: Optional[str] = None
