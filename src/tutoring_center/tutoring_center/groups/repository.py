from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Group


class GroupRepository(Protocol):
    def get_by_id(self, group_id: str) -> Optional[Group]:
        raise NotImplementedError

    def list_student_ids(self, group_id: str) -> Sequence[str]:
        """Current roster of the group, ordered by student id."""

        raise NotImplementedError
