from __future__ import annotations

from datetime import date, timezone
from typing import Iterable, Optional, Sequence
from zoneinfo import ZoneInfo

from ..sessions.model import Session
from .model import Classification, Occurrence


def _local_date(session: Session, zone: Optional[ZoneInfo]) -> date:
    return session.start_at_utc.astimezone(zone or timezone.utc).date()


def classify_one(occurrence: Occurrence, candidates: Sequence[Session], *, zone: Optional[ZoneInfo] = None) -> Classification:
    """Classify a single occurrence against the tutor's sessions (sorted by start, id).

    An exact slot match wins over an overlap, since an exact match overlaps too.
    """
    for s in candidates:
        if s.same_slot(occurrence.start_at_utc, occurrence.end_at_utc):
            return Classification.duplicate(session_id=s.session_id, on=_local_date(s, zone))

    for s in candidates:
        if s.overlaps(occurrence.start_at_utc, occurrence.end_at_utc):
            return Classification.conflict(session_id=s.session_id, on=_local_date(s, zone))

    return Classification.create()


def classify(
    occurrences: Iterable[Occurrence],
    existing: Iterable[Session],
    *,
    tutor_id: str,
    zone: Optional[ZoneInfo] = None,
) -> list[tuple[Occurrence, Classification]]:
    """Partition occurrences into create / skip-duplicate / conflict.

    Only sessions of `tutor_id` are considered; other tutors at the same center
    are independently schedulable. Pure: same inputs, same partition.
    """
    candidates = sorted(
        (s for s in existing if s.tutor_id == tutor_id),
        key=lambda s: (s.start_at_utc, s.end_at_utc, s.session_id),
    )
    return [(occ, classify_one(occ, candidates, zone=zone)) for occ in occurrences]
