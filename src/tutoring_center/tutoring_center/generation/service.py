from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..centers.repository import CenterRepository
from ..core.constants import DEFAULT_CREATED_ID_LIMIT, DEFAULT_SAMPLE_LIMIT
from ..core.enums import ClassificationKind
from ..core.exceptions import DuplicateSessionError
from ..groups.repository import GroupRepository
from ..sessions.model import NewSession
from ..sessions.repository import SessionRepository
from ..sessions.service import check_participants, require_center, resolve_roster
from .classifier import classify
from .expander import expand, fetch_window, occurrence_range, validate_request
from .model import (
    Classification,
    GenerationOutcome,
    GenerationPlan,
    GenerationRequest,
    Occurrence,
    SampleItem,
    Summary,
)
from .zoom_link import normalize_zoom_link

logger = logging.getLogger(__name__)


def summarize(
    classified: Iterable[tuple[Occurrence, Classification]],
    kind: ClassificationKind,
    *,
    sample_limit: int,
) -> Summary:
    count = 0
    sample: list[SampleItem] = []
    for occ, c in classified:
        if c.kind != kind:
            continue
        count += 1
        if len(sample) < sample_limit and c.reason is not None:
            sample.append(SampleItem(date=occ.local_date, reason=c.reason))
    return Summary(count=count, sample=tuple(sample))


class SessionGenerationService:
    """Preview and commit of recurring session generation.

    Both operations run the same `plan()` pipeline, so for an unchanged session
    table commit reports exactly the counts preview showed.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        centers: CenterRepository,
        groups: Optional[GroupRepository] = None,
        *,
        sample_limit: int = DEFAULT_SAMPLE_LIMIT,
        created_id_limit: int = DEFAULT_CREATED_ID_LIMIT,
    ):
        self._sessions = sessions
        self._centers = centers
        self._groups = groups
        self._sample_limit = int(sample_limit)
        self._created_id_limit = int(created_id_limit)

    def plan(self, request: GenerationRequest) -> GenerationPlan:
        # Pure checks first: nothing is read before the request is known to be valid.
        zone = validate_request(request)
        check_participants(request.session_type, student_id=request.student_id, group_id=request.group_id)
        zoom_link = normalize_zoom_link(request.zoom_link)
        occurrences = expand(request, zone=zone)

        # Unknown references are rejected before any session is read.
        require_center(self._centers, request.center_id)
        student_ids = resolve_roster(
            self._groups,
            center_id=request.center_id,
            session_type=request.session_type,
            student_id=request.student_id,
            group_id=request.group_id,
        )

        existing = []
        if occurrences:
            window = fetch_window(request, zone=zone)
            existing = self._sessions.list_for_tutor_in_range(
                center_id=request.center_id,
                tutor_id=request.tutor_id,
                from_utc=window.from_utc,
                to_utc=window.to_utc,
            )

        return GenerationPlan(
            request=request,
            classified=tuple(classify(occurrences, existing, tutor_id=request.tutor_id, zone=zone)),
            range=occurrence_range(request, occurrences, zone=zone),
            zoom_link=zoom_link,
            student_ids=student_ids,
        )

    def _outcome(
        self,
        plan: GenerationPlan,
        classified: tuple[tuple[Occurrence, Classification], ...],
        *,
        committed: bool,
        created_ids: tuple[int, ...] = (),
    ) -> GenerationOutcome:
        duplicates = summarize(classified, ClassificationKind.WOULD_SKIP_DUPLICATE, sample_limit=self._sample_limit)
        conflicts = summarize(classified, ClassificationKind.WOULD_CONFLICT, sample_limit=self._sample_limit)
        created = sum(1 for _, c in classified if c.kind == ClassificationKind.WOULD_CREATE)
        return GenerationOutcome(
            range=plan.range,
            created_count=created,
            skipped_duplicate_count=duplicates.count,
            conflict_count=conflicts.count,
            duplicates_summary=duplicates,
            conflicts_summary=conflicts,
            zoom_link_applied=plan.zoom_link is not None,
            committed=committed,
            created_session_ids=created_ids[: self._created_id_limit],
        )

    def preview(self, request: GenerationRequest) -> GenerationOutcome:
        plan = self.plan(request)
        outcome = self._outcome(plan, plan.classified, committed=False)
        logger.info(
            "generation preview center=%s tutor=%s create=%s duplicate=%s conflict=%s",
            request.center_id,
            request.tutor_id,
            outcome.created_count,
            outcome.skipped_duplicate_count,
            outcome.conflict_count,
        )
        return outcome

    def _new_session(self, plan: GenerationPlan, occ: Occurrence) -> NewSession:
        req = plan.request
        return NewSession(
            center_id=req.center_id,
            tutor_id=req.tutor_id,
            session_type=req.session_type,
            start_at_utc=occ.start_at_utc,
            end_at_utc=occ.end_at_utc,
            timezone=req.timezone,
            group_id=req.group_id,
            zoom_link=plan.zoom_link,
            student_ids=plan.student_ids,
        )

    def commit(self, request: GenerationRequest) -> GenerationOutcome:
        """Create every WOULD_CREATE occurrence in one transaction.

        A unique-key rejection means another commit took the slot first; it is
        counted as a duplicate. Any other PersistenceFailure rolls back the whole
        batch and propagates.
        """
        plan = self.plan(request)

        final: list[tuple[Occurrence, Classification]] = []
        created_ids: list[int] = []
        with self._sessions.atomic():
            for occ, c in plan.classified:
                if c.kind != ClassificationKind.WOULD_CREATE:
                    final.append((occ, c))
                    continue
                try:
                    session = self._sessions.create(self._new_session(plan, occ))
                except DuplicateSessionError:
                    logger.warning(
                        "slot taken concurrently tutor=%s start=%s; counted as duplicate",
                        request.tutor_id,
                        occ.start_at_utc.isoformat(),
                    )
                    final.append((occ, Classification.duplicate(on=occ.local_date)))
                    continue
                created_ids.append(session.session_id)
                final.append((occ, c))

        outcome = self._outcome(plan, tuple(final), committed=True, created_ids=tuple(created_ids))
        logger.info(
            "generation commit center=%s tutor=%s created=%s duplicate=%s conflict=%s",
            request.center_id,
            request.tutor_id,
            outcome.created_count,
            outcome.skipped_duplicate_count,
            outcome.conflict_count,
        )
        return outcome
