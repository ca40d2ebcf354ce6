from __future__ import annotations

from typing import Optional
from urllib.parse import urlsplit

from ..core.exceptions import InvalidRequest

MAX_ZOOM_LINK_LENGTH = 500


def normalize_zoom_link(value: Optional[str]) -> Optional[str]:
    """Trim a meeting link; blank means no link. Only absolute http(s) URLs are accepted."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidRequest("Invalid zoom link")

    link = value.strip()
    if not link:
        return None
    if len(link) > MAX_ZOOM_LINK_LENGTH or any(ch.isspace() for ch in link):
        raise InvalidRequest("Invalid zoom link")

    parts = urlsplit(link)
    if parts.scheme.lower() not in {"http", "https"} or not parts.netloc:
        raise InvalidRequest("Invalid zoom link")
    return link
