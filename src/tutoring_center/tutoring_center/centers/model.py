from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Center:
    center_id: str
    name: str
    timezone: str
