from __future__ import annotations

from enum import Enum


class SessionType(str, Enum):
    """Loại buổi học: kèm riêng hoặc theo nhóm/lớp."""

    ONE_ON_ONE = "ONE_ON_ONE"
    GROUP = "GROUP"
    CLASS = "CLASS"


class ClassificationKind(str, Enum):
    """Kết quả phân loại một buổi dự kiến so với lịch đã có."""

    WOULD_CREATE = "WOULD_CREATE"
    WOULD_SKIP_DUPLICATE = "WOULD_SKIP_DUPLICATE"
    WOULD_CONFLICT = "WOULD_CONFLICT"


class SampleReason(str, Enum):
    """Lý do ghi kèm mỗi mẫu trong bản tóm tắt trùng lặp/xung đột."""

    DUPLICATE_SESSION_EXISTS = "DUPLICATE_SESSION_EXISTS"
    TUTOR_TIME_OVERLAP = "TUTOR_TIME_OVERLAP"
