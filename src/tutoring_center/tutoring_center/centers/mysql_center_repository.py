from __future__ import annotations

from typing import Optional

import mysql.connector

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, translate_mysql_error
from .model import Center
from .repository import CenterRepository


class MySQLCenterRepository(CenterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, center_id: str) -> Optional[Center]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "SELECT center_id, name, timezone FROM centers WHERE center_id=%s",
                    (center_id,),
                )
                r = fetchone(cur)
        except mysql.connector.Error as e:
            raise translate_mysql_error(e) from e

        if not r:
            return None
        return Center(center_id=str(r["center_id"]), name=r["name"], timezone=r["timezone"])
