from __future__ import annotations

from typing import Optional

from ..core.exceptions import InvalidRequest


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise InvalidRequest(f"{field_name} is required")
    return str(value).strip()


def optional_str(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None
