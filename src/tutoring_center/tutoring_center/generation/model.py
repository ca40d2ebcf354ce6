from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import to_iso_z
from ..core.enums import ClassificationKind, SampleReason, SessionType


@dataclass(frozen=True)
class GenerationRequest:
    """One recurring-generation call: a weekly pattern for one tutor at one center."""

    center_id: str
    tutor_id: str
    session_type: SessionType
    start_date: date
    end_date: date
    weekdays: frozenset[int]
    start_time: time
    end_time: time
    timezone: str
    student_id: Optional[str] = None
    group_id: Optional[str] = None
    zoom_link: Optional[str] = None


@dataclass(frozen=True)
class Occurrence:
    local_date: date
    start_at_utc: datetime
    end_at_utc: datetime


@dataclass(frozen=True)
class Classification:
    kind: ClassificationKind
    reason: Optional[SampleReason] = None
    colliding_session_id: Optional[int] = None
    colliding_date: Optional[date] = None

    @classmethod
    def create(cls) -> "Classification":
        return cls(kind=ClassificationKind.WOULD_CREATE)

    @classmethod
    def duplicate(cls, *, session_id: Optional[int] = None, on: Optional[date] = None) -> "Classification":
        return cls(
            kind=ClassificationKind.WOULD_SKIP_DUPLICATE,
            reason=SampleReason.DUPLICATE_SESSION_EXISTS,
            colliding_session_id=session_id,
            colliding_date=on,
        )

    @classmethod
    def conflict(cls, *, session_id: int, on: date) -> "Classification":
        return cls(
            kind=ClassificationKind.WOULD_CONFLICT,
            reason=SampleReason.TUTOR_TIME_OVERLAP,
            colliding_session_id=session_id,
            colliding_date=on,
        )


@dataclass(frozen=True)
class DateRange:
    from_utc: datetime
    to_utc: datetime

    def to_dict(self) -> dict:
        return {"from": to_iso_z(self.from_utc), "to": to_iso_z(self.to_utc)}


@dataclass(frozen=True)
class SampleItem:
    date: date
    reason: SampleReason

    def to_dict(self) -> dict:
        return {"date": self.date.isoformat(), "reason": self.reason.value}


@dataclass(frozen=True)
class Summary:
    count: int
    sample: tuple[SampleItem, ...] = ()

    def to_dict(self) -> dict:
        return {"count": self.count, "sample": [s.to_dict() for s in self.sample]}


@dataclass(frozen=True)
class GenerationPlan:
    """Result of the shared expand + classify pipeline, before any write."""

    request: GenerationRequest
    classified: tuple[tuple[Occurrence, Classification], ...]
    range: DateRange
    zoom_link: Optional[str]
    student_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class GenerationOutcome:
    range: DateRange
    created_count: int
    skipped_duplicate_count: int
    conflict_count: int
    duplicates_summary: Summary
    conflicts_summary: Summary
    zoom_link_applied: bool
    committed: bool = False
    created_session_ids: tuple[int, ...] = field(default_factory=tuple)

    @property
    def would_create_count(self) -> int:
        return self.created_count

    def to_preview_payload(self) -> dict:
        return {
            "range": self.range.to_dict(),
            "wouldCreateCount": self.created_count,
            "wouldSkipDuplicateCount": self.skipped_duplicate_count,
            "wouldConflictCount": self.conflict_count,
            "duplicatesSummary": self.duplicates_summary.to_dict(),
            "conflictsSummary": self.conflicts_summary.to_dict(),
            "zoomLinkApplied": self.zoom_link_applied,
        }

    def to_commit_payload(self) -> dict:
        return {
            "createdCount": self.created_count,
            "skippedDuplicateCount": self.skipped_duplicate_count,
            "conflictCount": self.conflict_count,
            "range": self.range.to_dict(),
            "duplicatesSummary": self.duplicates_summary.to_dict(),
            "conflictsSummary": self.conflicts_summary.to_dict(),
            "zoomLinkApplied": self.zoom_link_applied,
            "createdSampleIds": list(self.created_session_ids),
        }
