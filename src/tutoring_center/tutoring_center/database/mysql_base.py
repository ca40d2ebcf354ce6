from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from ..core.exceptions import DuplicateSessionError, PersistenceFailure
from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def to_db_utc(value: datetime) -> datetime:
    """Aware datetime -> naive UTC datetime for a DATETIME column."""
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def from_db_utc(value: datetime) -> datetime:
    """Naive UTC DATETIME value -> aware UTC datetime."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def translate_mysql_error(exc: mysql.connector.Error) -> PersistenceFailure:
    """Map connector errors onto the domain's persistence exceptions."""
    if getattr(exc, "errno", None) == errorcode.ER_DUP_ENTRY:
        return DuplicateSessionError(str(exc))
    return PersistenceFailure(str(exc))
