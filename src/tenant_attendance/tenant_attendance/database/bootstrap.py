from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator, List

from .connection import DatabaseConnection

logger = logging.getLogger(__name__)

# Statements the bootstrap manages itself: the database name comes from DB_CONFIG.
_DB_LEVEL_RE = re.compile(r"(?im)^\s*(?:CREATE\s+DATABASE|USE)\b[^;]*;\s*$")

# Quoted strings/identifiers, `--` comments, statement separators.
_TOKEN_RE = re.compile(r"'(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\"|`[^`]*`|--[^\n]*|;", re.S)


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Split a schema file on top-level ';', ignoring quoted text and line comments."""
    sql = _DB_LEVEL_RE.sub("", sql)
    parts: List[str] = []
    pos = 0
    for match in _TOKEN_RE.finditer(sql):
        token = match.group(0)
        parts.append(sql[pos : match.start()])
        pos = match.end()
        if token == ";":
            stmt = "".join(parts).strip()
            parts = []
            if stmt:
                yield stmt
        elif not token.startswith("--"):
            parts.append(token)
    tail = ("".join(parts) + sql[pos:]).strip()
    if tail:
        yield tail


def ensure_database_exists(conn_factory: DatabaseConnection) -> None:
    name = conn_factory.config.database
    server = conn_factory.connect(with_database=False)
    try:
        server.cursor().execute(
            f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        server.commit()
    finally:
        server.close()


def apply_schema(conn_factory: DatabaseConnection, *, schema_path: str | Path) -> int:
    """Create the database if needed and run every statement of `schema_path`; returns the statement count."""
    ensure_database_exists(conn_factory)
    statements = list(iter_sql_statements(Path(schema_path).read_text(encoding="utf-8")))

    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        for statement in statements:
            cur.execute(statement)
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()

    logger.info("Applied %d statements from %s", len(statements), schema_path)
    return len(statements)


def list_tables(conn_factory: DatabaseConnection) -> List[str]:
    conn = conn_factory.connect()
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return sorted(str(row[0]) for row in cur.fetchall())
    finally:
        conn.close()
