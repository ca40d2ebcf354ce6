from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .centers.mysql_center_repository import MySQLCenterRepository
from .centers.repository import CenterRepository
from .core.constants import DEFAULT_CREATED_ID_LIMIT, DEFAULT_SAMPLE_LIMIT
from .database.connection import DBConfig, DatabaseConnection
from .generation.service import SessionGenerationService
from .groups.mysql_group_repository import MySQLGroupRepository
from .groups.repository import GroupRepository
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionService


@dataclass(frozen=True)
class Container:
    sessions_repo: SessionRepository
    centers_repo: CenterRepository
    groups_repo: GroupRepository

    session_service: SessionService
    generation_service: SessionGenerationService

    conn: Optional[DatabaseConnection] = None


def build_container(
    *,
    db_config: dict,
    sample_limit: int = DEFAULT_SAMPLE_LIMIT,
    created_id_limit: int = DEFAULT_CREATED_ID_LIMIT,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    sessions_repo = MySQLSessionRepository(conn)
    centers_repo = MySQLCenterRepository(conn)
    groups_repo = MySQLGroupRepository(conn)

    session_service = SessionService(sessions_repo, centers_repo, groups_repo)
    generation_service = SessionGenerationService(
        sessions_repo,
        centers_repo,
        groups_repo,
        sample_limit=sample_limit,
        created_id_limit=created_id_limit,
    )

    return Container(
        conn=conn,
        sessions_repo=sessions_repo,
        centers_repo=centers_repo,
        groups_repo=groups_repo,
        session_service=session_service,
        generation_service=generation_service,
    )
