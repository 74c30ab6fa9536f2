from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence, Tuple

import mysql.connector

from ..common.datetime_utils import from_db, to_db
from ..core.exceptions import AlreadyCheckedInToday
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_name, dump_vector, fetchall, fetchone, load_vector
from .model import Attendance, AttendanceReportRow
from .repository import AttendanceRepository

_COLUMNS = """
    a.attendance_id, a.tenant_id, a.employee_id, a.photo_url, a.embedding,
    a.check_in_time, a.check_in_date, a.match_confidence, a.created_at
"""


def _row_to_attendance(r: Dict[str, Any]) -> Attendance:
    confidence = r.get("match_confidence")
    return Attendance(
        attendance_id=str(r["attendance_id"]),
        tenant_id=str(r["tenant_id"]),
        employee_id=str(r["employee_id"]),
        photo_url=r["photo_url"],
        embedding=tuple(load_vector(r["embedding"])),
        check_in_time=from_db(r["check_in_time"]),
        check_in_date=r["check_in_date"],
        match_confidence=float(confidence) if confidence is not None else None,
        created_at=from_db(r.get("created_at")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_since(self, employee_id: str, since: datetime) -> Optional[Attendance]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances a
                WHERE a.employee_id=%s AND a.check_in_time >= %s
                ORDER BY a.check_in_time ASC
                LIMIT 1
                """,
                (employee_id, to_db(since)),
            )
            r = fetchone(cur)
            return _row_to_attendance(r) if r else None

    def create_checkin(
        self,
        *,
        tenant_id: str,
        employee_id: str,
        photo_url: str,
        embedding: Sequence[float],
        check_in_time: datetime,
        check_in_date: date,
        match_confidence: Optional[float] = None,
    ) -> Attendance:
        attendance_id = str(uuid.uuid4())
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendances(attendance_id, tenant_id, employee_id, photo_url, embedding,
                                            check_in_time, check_in_date, match_confidence)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        attendance_id,
                        tenant_id,
                        employee_id,
                        photo_url,
                        dump_vector(embedding),
                        to_db(check_in_time),
                        check_in_date,
                        match_confidence,
                    ),
                )
        except mysql.connector.IntegrityError as e:
            if duplicate_key_name(e) == "uq_attendances_employee_day":
                raise AlreadyCheckedInToday("Already checked in today") from e
            raise

        return Attendance(
            attendance_id=attendance_id,
            tenant_id=tenant_id,
            employee_id=employee_id,
            photo_url=photo_url,
            embedding=tuple(float(v) for v in embedding),
            check_in_time=check_in_time,
            check_in_date=check_in_date,
            match_confidence=match_confidence,
            created_at=check_in_time,
        )

    def list_for_employee(
        self,
        *,
        tenant_id: str,
        employee_id: str,
        start: Optional[datetime],
        end: Optional[datetime],
        offset: int,
        limit: int,
    ) -> Tuple[Sequence[Attendance], int]:
        clauses = ["a.tenant_id=%s", "a.employee_id=%s"]
        params: list[object] = [tenant_id, employee_id]
        if start is not None:
            clauses.append("a.check_in_time >= %s")
            params.append(to_db(start))
        if end is not None:
            clauses.append("a.check_in_time <= %s")
            params.append(to_db(end))
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendances a WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total", 0))
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances a
                WHERE {where}
                ORDER BY a.check_in_time DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params) + (int(limit), int(offset)),
            )
            return [_row_to_attendance(r) for r in fetchall(cur)], total

    def get_report_rows(
        self,
        *,
        tenant_id: str,
        start: datetime,
        end: datetime,
        employee_id: Optional[str] = None,
    ) -> Sequence[AttendanceReportRow]:
        clauses = ["a.tenant_id=%s", "a.check_in_time BETWEEN %s AND %s"]
        params: list[object] = [tenant_id, to_db(start), to_db(end)]
        if employee_id is not None:
            clauses.append("a.employee_id=%s")
            params.append(employee_id)
        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}, e.name AS employee_name, e.contact_number
                FROM attendances a
                JOIN employees e ON e.employee_id = a.employee_id
                WHERE {where}
                ORDER BY a.check_in_time DESC
                """,
                tuple(params),
            )
            return [
                AttendanceReportRow(
                    attendance=_row_to_attendance(r),
                    employee_name=r["employee_name"],
                    contact_number=r["contact_number"],
                )
                for r in fetchall(cur)
            ]
