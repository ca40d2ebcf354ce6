from __future__ import annotations

from typing import Optional, Sequence

import mysql.connector

from ..core.enums import SessionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, translate_mysql_error
from .model import Group
from .repository import GroupRepository


class MySQLGroupRepository(GroupRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, group_id: str) -> Optional[Group]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    SELECT group_id, center_id, name, group_type
                    FROM `groups`
                    WHERE group_id=%s
                    """,
                    (group_id,),
                )
                r = fetchone(cur)
        except mysql.connector.Error as e:
            raise translate_mysql_error(e) from e

        if not r:
            return None
        return Group(
            group_id=str(r["group_id"]),
            center_id=str(r["center_id"]),
            name=r["name"],
            group_type=SessionType(r["group_type"]),
        )

    def list_student_ids(self, group_id: str) -> Sequence[str]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "SELECT student_id FROM group_students WHERE group_id=%s ORDER BY student_id",
                    (group_id,),
                )
                return [str(r["student_id"]) for r in fetchall(cur)]
        except mysql.connector.Error as e:
            raise translate_mysql_error(e) from e
