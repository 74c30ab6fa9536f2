from __future__ import annotations

import json
import re
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

import mysql.connector
from mysql.connector import errorcode

from .connection import DatabaseConnection

_DUP_KEY_RE = re.compile(r"for key '(?:[^'.]+\.)?([^']+)'")


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    """One connection, one transaction: commit when the block exits cleanly, roll back otherwise."""
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


def duplicate_key_name(exc: Exception) -> Optional[str]:
    """Name of the unique key a duplicate-entry IntegrityError tripped on, else None."""
    if not isinstance(exc, mysql.connector.IntegrityError):
        return None
    if getattr(exc, "errno", None) != errorcode.ER_DUP_ENTRY:
        return None
    match = _DUP_KEY_RE.search(str(getattr(exc, "msg", "") or exc))
    return match.group(1) if match else ""


def dump_vector(values) -> str:
    return json.dumps([float(v) for v in values])


def load_vector(raw: Any) -> List[float]:
    # JSON columns come back as str or bytes depending on the connector build.
    if raw is None:
        return []
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        raw = json.loads(raw)
    return [float(v) for v in raw]
