from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import SessionType


@dataclass(frozen=True)
class Group:
    group_id: str
    center_id: str
    name: str
    group_type: SessionType
