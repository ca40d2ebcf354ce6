from __future__ import annotations

from datetime import datetime
from typing import ContextManager, Optional, Protocol, Sequence

from .model import NewSession, Session


class SessionRepository(Protocol):
    def list_for_tutor_in_range(
        self,
        *,
        center_id: str,
        tutor_id: str,
        from_utc: datetime,
        to_utc: datetime,
    ) -> Sequence[Session]:
        """Sessions of one tutor at one center overlapping [from_utc, to_utc)."""

        raise NotImplementedError

    def create(self, new_session: NewSession) -> Session:
        """Insert one session with its roster.

        Raises DuplicateSessionError when the (center, tutor, start, end) slot
        already exists, PersistenceFailure for anything else.
        """

        raise NotImplementedError

    def atomic(self) -> ContextManager[None]:
        """Run the enclosed creates in one transaction (rolled back on error)."""

        raise NotImplementedError

    def list_range(
        self,
        *,
        from_utc: datetime,
        to_utc: datetime,
        center_id: Optional[str] = None,
        tutor_id: Optional[str] = None,
    ) -> Sequence[Session]:
        raise NotImplementedError
