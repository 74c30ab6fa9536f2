from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ..common.datetime_utils import from_db
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dump_vector, fetchall, fetchone, load_vector
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, tenant_id, name, photo_url, embedding, salary,
    emergency_contact_number, contact_number, created_at, updated_at
"""

_UPDATABLE = {
    "name",
    "photo_url",
    "embedding",
    "salary",
    "emergency_contact_number",
    "contact_number",
}


def _row_to_employee(r: Dict[str, Any]) -> Employee:
    return Employee(
        employee_id=str(r["employee_id"]),
        tenant_id=str(r["tenant_id"]),
        name=r["name"],
        photo_url=r["photo_url"],
        embedding=tuple(load_vector(r["embedding"])),
        salary=Decimal(str(r["salary"])),
        emergency_contact_number=r["emergency_contact_number"],
        contact_number=r["contact_number"],
        created_at=from_db(r.get("created_at")),
        updated_at=from_db(r.get("updated_at")),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (employee_id,))
            r = fetchone(cur)
            return _row_to_employee(r) if r else None

    def create(
        self,
        *,
        tenant_id: str,
        name: str,
        photo_url: str,
        embedding: Sequence[float],
        salary: Decimal,
        emergency_contact_number: str,
        contact_number: str,
    ) -> Employee:
        employee_id = str(uuid.uuid4())
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO employees(employee_id, tenant_id, name, photo_url, embedding, salary,
                                      emergency_contact_number, contact_number)
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    employee_id,
                    tenant_id,
                    name,
                    photo_url,
                    dump_vector(embedding),
                    salary,
                    emergency_contact_number,
                    contact_number,
                ),
            )
        created = self.get_by_id(employee_id)
        if created is None:
            raise RuntimeError(f"Employee {employee_id} vanished right after insert")
        return created

    def list_for_tenant(
        self,
        tenant_id: str,
        *,
        offset: int,
        limit: int,
        search: Optional[str] = None,
    ) -> Tuple[Sequence[Employee], int]:
        clauses = ["tenant_id=%s"]
        params: list[object] = [tenant_id]
        if search:
            # utf8mb4_unicode_ci collation makes LIKE case-insensitive.
            clauses.append("name LIKE %s")
            params.append(f"%{search}%")
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM employees WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total", 0))
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employees
                WHERE {where}
                ORDER BY created_at DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(offset)),
            )
            return [_row_to_employee(r) for r in fetchall(cur)], total

    def update(self, employee_id: str, changes: Mapping[str, Any]) -> Optional[Employee]:
        sets: list[str] = []
        params: list[object] = []
        for column, value in changes.items():
            if column not in _UPDATABLE:
                raise KeyError(f"Field {column!r} is not updatable")
            sets.append(f"{column}=%s")
            params.append(dump_vector(value) if column == "embedding" else value)

        if sets:
            params.append(employee_id)
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(f"UPDATE employees SET {', '.join(sets)} WHERE employee_id=%s", tuple(params))

        return self.get_by_id(employee_id)

    def delete_by_id(self, employee_id: str) -> bool:
        # Attendance rows go with it (ON DELETE CASCADE).
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM employees WHERE employee_id=%s", (employee_id,))
            return cur.rowcount > 0
