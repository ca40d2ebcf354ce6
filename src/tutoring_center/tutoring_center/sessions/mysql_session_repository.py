from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Iterator, Optional, Sequence

import mysql.connector

from ..core.enums import SessionType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, from_db_utc, to_db_utc, translate_mysql_error
from .model import NewSession, Session
from .repository import SessionRepository

_SESSION_COLUMNS = """
    s.session_id, s.center_id, s.tutor_id, s.session_type, s.group_id,
    s.start_at_utc, s.end_at_utc, s.timezone, s.zoom_link
"""


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory
        # Cursor of the open atomic() block, per thread.
        self._local = threading.local()

    @contextmanager
    def atomic(self) -> Iterator[None]:
        if getattr(self._local, "cur", None) is not None:
            yield
            return

        try:
            with db_cursor(self._conn_factory) as (_, cur):
                self._local.cur = cur
                try:
                    yield
                finally:
                    self._local.cur = None
        except mysql.connector.Error as e:
            raise translate_mysql_error(e) from e

    @contextmanager
    def _cursor(self):
        cur = getattr(self._local, "cur", None)
        if cur is not None:
            yield cur
            return
        with db_cursor(self._conn_factory) as (_, cur):
            yield cur

    def list_for_tutor_in_range(
        self,
        *,
        center_id: str,
        tutor_id: str,
        from_utc: datetime,
        to_utc: datetime,
    ) -> Sequence[Session]:
        return self.list_range(from_utc=from_utc, to_utc=to_utc, center_id=center_id, tutor_id=tutor_id)

    def list_range(
        self,
        *,
        from_utc: datetime,
        to_utc: datetime,
        center_id: Optional[str] = None,
        tutor_id: Optional[str] = None,
    ) -> Sequence[Session]:
        clauses = ["s.start_at_utc < %s", "s.end_at_utc > %s"]
        params: list[object] = [to_db_utc(to_utc), to_db_utc(from_utc)]
        if center_id is not None:
            clauses.append("s.center_id=%s")
            params.append(center_id)
        if tutor_id is not None:
            clauses.append("s.tutor_id=%s")
            params.append(tutor_id)

        where = " AND ".join(clauses)

        try:
            with self._cursor() as cur:
                cur.execute(
                    f"""
                    SELECT {_SESSION_COLUMNS}
                    FROM sessions s
                    WHERE {where}
                    ORDER BY s.start_at_utc ASC, s.session_id ASC
                    """,
                    tuple(params),
                )
                rows = fetchall(cur)
                rosters = self._load_rosters(cur, [int(r["session_id"]) for r in rows])
        except mysql.connector.Error as e:
            raise translate_mysql_error(e) from e

        return [self._to_session(r, rosters.get(int(r["session_id"]), ())) for r in rows]

    def create(self, new_session: NewSession) -> Session:
        try:
            with self._cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO sessions(
                        center_id, tutor_id, session_type, group_id,
                        start_at_utc, end_at_utc, timezone, zoom_link
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        new_session.center_id,
                        new_session.tutor_id,
                        new_session.session_type.value,
                        new_session.group_id,
                        to_db_utc(new_session.start_at_utc),
                        to_db_utc(new_session.end_at_utc),
                        new_session.timezone,
                        new_session.zoom_link,
                    ),
                )
                session_id = int(cur.lastrowid)

                if new_session.student_ids:
                    cur.executemany(
                        "INSERT IGNORE INTO session_students(session_id, student_id) VALUES(%s,%s)",
                        [(session_id, sid) for sid in new_session.student_ids],
                    )
        except mysql.connector.Error as e:
            raise translate_mysql_error(e) from e

        return Session(
            session_id=session_id,
            center_id=new_session.center_id,
            tutor_id=new_session.tutor_id,
            session_type=new_session.session_type,
            start_at_utc=new_session.start_at_utc,
            end_at_utc=new_session.end_at_utc,
            timezone=new_session.timezone,
            group_id=new_session.group_id,
            zoom_link=new_session.zoom_link,
            student_ids=tuple(new_session.student_ids),
        )

    @staticmethod
    def _load_rosters(cur, session_ids: list[int]) -> dict[int, tuple[str, ...]]:
        if not session_ids:
            return {}

        placeholders = ",".join(["%s"] * len(session_ids))
        cur.execute(
            f"""
            SELECT session_id, student_id
            FROM session_students
            WHERE session_id IN ({placeholders})
            ORDER BY session_id, student_id
            """,
            tuple(session_ids),
        )
        out: dict[int, list[str]] = {}
        for r in fetchall(cur):
            out.setdefault(int(r["session_id"]), []).append(str(r["student_id"]))
        return {k: tuple(v) for k, v in out.items()}

    @staticmethod
    def _to_session(r: dict, student_ids: tuple[str, ...]) -> Session:
        return Session(
            session_id=int(r["session_id"]),
            center_id=str(r["center_id"]),
            tutor_id=str(r["tutor_id"]),
            session_type=SessionType(r["session_type"]),
            start_at_utc=from_db_utc(r["start_at_utc"]),
            end_at_utc=from_db_utc(r["end_at_utc"]),
            timezone=r["timezone"],
            group_id=r.get("group_id"),
            zoom_link=r.get("zoom_link"),
            student_ids=student_ids,
        )
