from __future__ import annotations

from typing import Optional, Protocol

from .model import Center


class CenterRepository(Protocol):
    def get_by_id(self, center_id: str) -> Optional[Center]:
        raise NotImplementedError
