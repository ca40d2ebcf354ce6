from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Optional

import pytest

from src.tutoring_center.tutoring_center.centers.model import Center
from src.tutoring_center.tutoring_center.core.enums import SampleReason, SessionType
from src.tutoring_center.tutoring_center.core.exceptions import (
    DuplicateSessionError,
    InvalidRequest,
    PersistenceFailure,
)
from src.tutoring_center.tutoring_center.generation import expander
from src.tutoring_center.tutoring_center.generation.model import GenerationRequest
from src.tutoring_center.tutoring_center.generation.service import SessionGenerationService
from src.tutoring_center.tutoring_center.groups.model import Group
from src.tutoring_center.tutoring_center.sessions.model import NewSession, Session


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class InMemorySessions:
    """Session table with the (center, tutor, start, end) unique key."""

    def __init__(self, sessions=()):
        self._rows: dict[int, Session] = {}
        self._next_id = 100
        self.list_calls = 0
        self.create_calls = 0
        self.fail_on_create_call: Optional[int] = None
        # Slots another writer takes right before our insert lands.
        self.race_slots: set[tuple] = set()
        for s in sessions:
            self._rows[s.session_id] = s

    @property
    def all(self) -> list[Session]:
        return sorted(self._rows.values(), key=lambda s: (s.start_at_utc, s.session_id))

    @contextmanager
    def atomic(self):
        snapshot = dict(self._rows)
        next_id = self._next_id
        try:
            yield
        except Exception:
            self._rows = snapshot
            self._next_id = next_id
            raise

    def list_for_tutor_in_range(self, *, center_id, tutor_id, from_utc, to_utc):
        self.list_calls += 1
        return [
            s
            for s in self.all
            if s.center_id == center_id and s.tutor_id == tutor_id and s.overlaps(from_utc, to_utc)
        ]

    def list_range(self, *, from_utc, to_utc, center_id=None, tutor_id=None):
        return [
            s
            for s in self.all
            if s.overlaps(from_utc, to_utc)
            and (center_id is None or s.center_id == center_id)
            and (tutor_id is None or s.tutor_id == tutor_id)
        ]

    def _insert(self, new: NewSession) -> Session:
        self._next_id += 1
        s = Session(
            session_id=self._next_id,
            center_id=new.center_id,
            tutor_id=new.tutor_id,
            session_type=new.session_type,
            start_at_utc=new.start_at_utc,
            end_at_utc=new.end_at_utc,
            timezone=new.timezone,
            group_id=new.group_id,
            zoom_link=new.zoom_link,
            student_ids=tuple(new.student_ids),
        )
        self._rows[s.session_id] = s
        return s

    def create(self, new: NewSession) -> Session:
        self.create_calls += 1
        if self.fail_on_create_call == self.create_calls:
            raise PersistenceFailure("connection lost")

        key = (new.center_id, new.tutor_id, new.start_at_utc, new.end_at_utc)
        if key in self.race_slots:
            self.race_slots.discard(key)
            self._insert(new)
            raise DuplicateSessionError("Duplicate entry")
        if any((s.center_id, s.tutor_id, s.start_at_utc, s.end_at_utc) == key for s in self._rows.values()):
            raise DuplicateSessionError("Duplicate entry")
        return self._insert(new)


class KnownCenters:
    def __init__(self, *center_ids: str):
        self._ids = set(center_ids or ("c1",))
        self.lookups = 0

    def get_by_id(self, center_id: str) -> Optional[Center]:
        self.lookups += 1
        if center_id not in self._ids:
            return None
        return Center(center_id=center_id, name=center_id.upper(), timezone="America/Edmonton")


@dataclass
class InMemoryGroups:
    groups: dict[str, Group]
    rosters: dict[str, list[str]] = field(default_factory=dict)

    def get_by_id(self, group_id: str) -> Optional[Group]:
        return self.groups.get(group_id)

    def list_student_ids(self, group_id: str):
        return list(self.rosters.get(group_id, []))


def make_request(**overrides) -> GenerationRequest:
    base = dict(
        center_id="c1",
        tutor_id="t1",
        session_type=SessionType.ONE_ON_ONE,
        student_id="s1",
        start_date=date(2025, 1, 1),
        end_date=date(2025, 1, 31),
        weekdays=frozenset({1}),
        start_time=time(9, 0),
        end_time=time(10, 0),
        timezone="America/Edmonton",
    )
    base.update(overrides)
    return GenerationRequest(**base)


def seeded_sessions() -> InMemorySessions:
    def s(session_id, start, end, tutor_id="t1"):
        return Session(
            session_id=session_id,
            center_id="c1",
            tutor_id=tutor_id,
            session_type=SessionType.ONE_ON_ONE,
            start_at_utc=start,
            end_at_utc=end,
            timezone="America/Edmonton",
            student_ids=("s9",),
        )

    return InMemorySessions(
        [
            s(1, utc(2025, 1, 13, 16), utc(2025, 1, 13, 17)),  # exact slot -> duplicate
            s(2, utc(2025, 1, 20, 16, 30), utc(2025, 1, 20, 17, 30)),  # overlap -> conflict
            s(3, utc(2025, 1, 27, 16), utc(2025, 1, 27, 17), tutor_id="t2"),  # other tutor
        ]
    )


def counts(outcome):
    return outcome.created_count, outcome.skipped_duplicate_count, outcome.conflict_count


def test_preview_partitions_without_writing():
    sessions = seeded_sessions()
    svc = SessionGenerationService(sessions, KnownCenters())

    outcome = svc.preview(make_request())

    assert counts(outcome) == (2, 1, 1)
    assert outcome.committed is False
    assert sessions.create_calls == 0
    assert len(sessions.all) == 3
    assert outcome.duplicates_summary.to_dict() == {
        "count": 1,
        "sample": [{"date": "2025-01-13", "reason": "DUPLICATE_SESSION_EXISTS"}],
    }
    assert outcome.conflicts_summary.to_dict() == {
        "count": 1,
        "sample": [{"date": "2025-01-20", "reason": "TUTOR_TIME_OVERLAP"}],
    }


def test_preview_is_repeatable():
    svc = SessionGenerationService(seeded_sessions(), KnownCenters())
    assert svc.preview(make_request()) == svc.preview(make_request())


def test_commit_matches_preview_counts():
    sessions = seeded_sessions()
    svc = SessionGenerationService(sessions, KnownCenters())
    req = make_request()

    preview = svc.preview(req)
    commit = svc.commit(req)

    assert counts(commit) == counts(preview)
    assert commit.created_count == preview.would_create_count
    assert commit.committed is True
    assert commit.range == preview.range
    assert len(commit.created_session_ids) == 2

    created = [s for s in sessions.all if s.session_id in commit.created_session_ids]
    assert [s.start_at_utc for s in created] == [utc(2025, 1, 6, 16), utc(2025, 1, 27, 16)]
    assert all(s.student_ids == ("s1",) for s in created)
    assert all(s.timezone == "America/Edmonton" for s in created)


def test_second_commit_creates_nothing():
    sessions = seeded_sessions()
    svc = SessionGenerationService(sessions, KnownCenters())
    req = make_request()

    first = svc.commit(req)
    second = svc.commit(req)

    assert second.created_count == 0
    assert second.skipped_duplicate_count == first.skipped_duplicate_count + first.created_count
    assert second.conflict_count == first.conflict_count
    assert len(sessions.all) == 5


def test_conflicting_occurrences_are_never_created():
    sessions = seeded_sessions()
    SessionGenerationService(sessions, KnownCenters()).commit(make_request())

    jan_20 = [s for s in sessions.all if s.start_at_utc.date() == date(2025, 1, 20)]
    assert [s.session_id for s in jan_20] == [2]


def test_same_slot_for_two_tutors_creates_both():
    sessions = InMemorySessions()
    svc = SessionGenerationService(sessions, KnownCenters())

    a = svc.commit(make_request(tutor_id="t1"))
    b = svc.commit(make_request(tutor_id="t2"))

    assert a.created_count == 4
    assert b.created_count == 4
    assert b.conflict_count == 0


def test_slot_taken_during_commit_counts_as_duplicate():
    sessions = seeded_sessions()
    sessions.race_slots.add(("c1", "t1", utc(2025, 1, 27, 16), utc(2025, 1, 27, 17)))
    svc = SessionGenerationService(sessions, KnownCenters())

    outcome = svc.commit(make_request())

    assert counts(outcome) == (1, 2, 1)
    assert [s.to_dict() for s in outcome.duplicates_summary.sample] == [
        {"date": "2025-01-13", "reason": "DUPLICATE_SESSION_EXISTS"},
        {"date": "2025-01-27", "reason": "DUPLICATE_SESSION_EXISTS"},
    ]


def test_persistence_failure_aborts_whole_commit():
    sessions = seeded_sessions()
    sessions.fail_on_create_call = 2
    svc = SessionGenerationService(sessions, KnownCenters())

    with pytest.raises(PersistenceFailure):
        svc.commit(make_request())

    assert len(sessions.all) == 3
    # A fresh preview still shows the full plan.
    assert counts(svc.preview(make_request())) == (2, 1, 1)


@pytest.mark.parametrize(
    "overrides",
    [
        {"end_time": time(8, 0)},
        {"timezone": "Nowhere/Special"},
        {"weekdays": frozenset()},
        {"student_id": None},
        {"group_id": "g1"},
        {"zoom_link": "not a link"},
    ],
)
def test_invalid_request_is_rejected_before_any_data_access(overrides):
    sessions = seeded_sessions()
    centers = KnownCenters()
    svc = SessionGenerationService(sessions, centers)

    with pytest.raises(InvalidRequest):
        svc.commit(make_request(**overrides))

    assert centers.lookups == 0
    assert sessions.list_calls == 0
    assert sessions.create_calls == 0


def test_zoom_link_is_normalized_and_attached_to_every_created_session():
    sessions = InMemorySessions()
    svc = SessionGenerationService(sessions, KnownCenters())

    outcome = svc.commit(make_request(zoom_link="  https://zoom.us/j/123  "))

    assert outcome.zoom_link_applied is True
    assert {s.zoom_link for s in sessions.all} == {"https://zoom.us/j/123"}


def test_blank_zoom_link_is_not_applied():
    outcome = SessionGenerationService(InMemorySessions(), KnownCenters()).preview(make_request(zoom_link="   "))
    assert outcome.zoom_link_applied is False


def test_samples_are_capped_but_count_is_not():
    sessions = InMemorySessions()
    svc = SessionGenerationService(sessions, KnownCenters(), sample_limit=2, created_id_limit=3)

    first = svc.commit(make_request(weekdays=frozenset(range(1, 8))))
    assert first.created_count == 31
    assert len(first.created_session_ids) == 3

    again = svc.preview(make_request(weekdays=frozenset(range(1, 8))))
    assert again.duplicates_summary.count == 31
    assert [s.date for s in again.duplicates_summary.sample] == [date(2025, 1, 1), date(2025, 1, 2)]
    assert all(s.reason == SampleReason.DUPLICATE_SESSION_EXISTS for s in again.duplicates_summary.sample)


def test_empty_expansion_skips_session_lookup():
    sessions = InMemorySessions()
    outcome = SessionGenerationService(sessions, KnownCenters()).preview(make_request(end_date=date(2025, 1, 3)))

    assert counts(outcome) == (0, 0, 0)
    assert sessions.list_calls == 0
    assert outcome.range.from_utc == utc(2025, 1, 1, 16)


def test_group_sessions_carry_the_group_roster():
    sessions = InMemorySessions()
    groups = InMemoryGroups(
        groups={"g1": Group(group_id="g1", center_id="c1", name="Math 7", group_type=SessionType.GROUP)},
        rosters={"g1": ["s1", "s2"]},
    )
    svc = SessionGenerationService(sessions, KnownCenters(), groups)

    outcome = svc.commit(make_request(session_type=SessionType.GROUP, student_id=None, group_id="g1"))

    assert outcome.created_count == 4
    assert {s.group_id for s in sessions.all} == {"g1"}
    assert {s.student_ids for s in sessions.all} == {("s1", "s2")}


@pytest.mark.parametrize(
    "group, session_type",
    [
        (Group(group_id="g1", center_id="c2", name="Elsewhere", group_type=SessionType.GROUP), SessionType.GROUP),
        (Group(group_id="g1", center_id="c1", name="Math 7", group_type=SessionType.GROUP), SessionType.CLASS),
    ],
)
def test_group_must_match_center_and_type(group, session_type):
    sessions = InMemorySessions()
    svc = SessionGenerationService(sessions, KnownCenters(), InMemoryGroups(groups={"g1": group}))

    with pytest.raises(InvalidRequest):
        svc.preview(make_request(session_type=session_type, student_id=None, group_id="g1"))
    assert sessions.list_calls == 0


def test_unknown_group_is_invalid():
    svc = SessionGenerationService(InMemorySessions(), KnownCenters(), InMemoryGroups(groups={}))
    with pytest.raises(InvalidRequest):
        svc.preview(make_request(session_type=SessionType.CLASS, student_id=None, group_id="nope"))


def test_unknown_center_is_rejected_before_sessions_are_read():
    sessions = seeded_sessions()
    centers = KnownCenters("c1")
    svc = SessionGenerationService(sessions, centers)

    with pytest.raises(InvalidRequest, match="Center not found"):
        svc.preview(make_request(center_id="no-such-center"))
    with pytest.raises(InvalidRequest, match="Center not found"):
        svc.commit(make_request(center_id="no-such-center"))

    assert centers.lookups == 2
    assert sessions.list_calls == 0
    assert sessions.create_calls == 0


def test_unknown_center_is_rejected_even_without_occurrences():
    svc = SessionGenerationService(InMemorySessions(), KnownCenters("c1"))
    with pytest.raises(InvalidRequest):
        svc.preview(make_request(center_id="c2", end_date=date(2025, 1, 3)))


def test_timezone_is_resolved_once_per_plan(monkeypatch):
    calls = []
    real_resolve = expander.resolve_zone

    def counting_resolve(name):
        calls.append(name)
        return real_resolve(name)

    monkeypatch.setattr(expander, "resolve_zone", counting_resolve)
    svc = SessionGenerationService(seeded_sessions(), KnownCenters())

    svc.preview(make_request())
    svc.preview(make_request(end_date=date(2025, 1, 3)))

    assert calls == ["America/Edmonton", "America/Edmonton"]
