from __future__ import annotations

import importlib
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Mapping, Optional, Sequence

import pytest

from src.tenant_attendance.tenant_attendance.attendance.model import Attendance, AttendanceReportRow
from src.tenant_attendance.tenant_attendance.auth.model import RefreshSession
from src.tenant_attendance.tenant_attendance.container import build_container
from src.tenant_attendance.tenant_attendance.core.enums import PlanType
from src.tenant_attendance.tenant_attendance.core.exceptions import (
    AlreadyCheckedInToday,
    OracleFailure,
    TaxIdTaken,
    UsernameTaken,
)
from src.tenant_attendance.tenant_attendance.core.settings import AppSettings
from src.tenant_attendance.tenant_attendance.employees.model import Employee
from src.tenant_attendance.tenant_attendance.integrations.face_oracle import FaceComparison
from src.tenant_attendance.tenant_attendance.main import create_app
from src.tenant_attendance.tenant_attendance.tenants.model import Tenant

# Office used throughout the tests (Bengaluru).
OFFICE_LAT, OFFICE_LON = 12.9716, 77.5946


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryTenants:
    def __init__(self):
        self.by_id: dict[str, Tenant] = {}

    def get_by_id(self, tenant_id: str) -> Optional[Tenant]:
        return self.by_id.get(tenant_id)

    def get_by_username(self, username: str) -> Optional[Tenant]:
        return next((t for t in self.by_id.values() if t.username == username), None)

    def get_by_gst(self, gst: str) -> Optional[Tenant]:
        return next((t for t in self.by_id.values() if t.gst == gst), None)

    def create(self, **fields: Any) -> Tenant:
        if self.get_by_username(fields["username"]):
            raise UsernameTaken("Username already exists")
        if self.get_by_gst(fields["gst"]):
            raise TaxIdTaken("GST number already registered")
        tenant = Tenant(tenant_id=str(uuid.uuid4()), **fields)
        self.by_id[tenant.tenant_id] = tenant
        return tenant

    def update(self, tenant_id: str, changes: Mapping[str, Any]) -> Optional[Tenant]:
        current = self.by_id.get(tenant_id)
        if current is None:
            return None
        updated = Tenant(**{**current.__dict__, **dict(changes)})
        self.by_id[tenant_id] = updated
        return updated

    def delete_by_id(self, tenant_id: str) -> bool:
        return self.by_id.pop(tenant_id, None) is not None


class InMemoryEmployees:
    def __init__(self):
        self.by_id: dict[str, Employee] = {}

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        return self.by_id.get(employee_id)

    def create(self, *, embedding: Sequence[float], **fields: Any) -> Employee:
        employee = Employee(
            employee_id=str(uuid.uuid4()),
            embedding=tuple(embedding),
            created_at=datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(seconds=len(self.by_id)),
            **fields,
        )
        self.by_id[employee.employee_id] = employee
        return employee

    def list_for_tenant(self, tenant_id: str, *, offset: int, limit: int, search: Optional[str] = None):
        items = [e for e in self.by_id.values() if e.tenant_id == tenant_id]
        if search:
            needle = search.lower()
            items = [e for e in items if needle in e.name.lower()]
        items.sort(key=lambda e: e.created_at, reverse=True)
        return items[offset : offset + limit], len(items)

    def update(self, employee_id: str, changes: Mapping[str, Any]) -> Optional[Employee]:
        current = self.by_id.get(employee_id)
        if current is None:
            return None
        data = {**current.__dict__, **dict(changes)}
        data["embedding"] = tuple(data["embedding"])
        updated = Employee(**data)
        self.by_id[employee_id] = updated
        return updated

    def delete_by_id(self, employee_id: str) -> bool:
        return self.by_id.pop(employee_id, None) is not None


class InMemoryAttendance:
    """Mirrors the (employee_id, check_in_date) unique key of the real table."""

    def __init__(self, employees: InMemoryEmployees):
        self._employees = employees
        self.rows: list[Attendance] = []

    def find_since(self, employee_id: str, since: datetime) -> Optional[Attendance]:
        return next((a for a in self.rows if a.employee_id == employee_id and a.check_in_time >= since), None)

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
        if any(a.employee_id == employee_id and a.check_in_date == check_in_date for a in self.rows):
            raise AlreadyCheckedInToday("Already checked in today")
        row = Attendance(
            attendance_id=str(uuid.uuid4()),
            tenant_id=tenant_id,
            employee_id=employee_id,
            photo_url=photo_url,
            embedding=tuple(embedding),
            check_in_time=check_in_time,
            check_in_date=check_in_date,
            match_confidence=match_confidence,
        )
        self.rows.append(row)
        return row

    def _between(self, rows, start, end):
        if start is not None:
            rows = [a for a in rows if a.check_in_time >= start]
        if end is not None:
            rows = [a for a in rows if a.check_in_time <= end]
        return sorted(rows, key=lambda a: a.check_in_time, reverse=True)

    def list_for_employee(self, *, tenant_id, employee_id, start, end, offset, limit):
        rows = [a for a in self.rows if a.tenant_id == tenant_id and a.employee_id == employee_id]
        rows = self._between(rows, start, end)
        return rows[offset : offset + limit], len(rows)

    def get_report_rows(self, *, tenant_id, start, end, employee_id=None):
        rows = [a for a in self.rows if a.tenant_id == tenant_id]
        if employee_id:
            rows = [a for a in rows if a.employee_id == employee_id]
        out = []
        for a in self._between(rows, start, end):
            employee = self._employees.get_by_id(a.employee_id)
            out.append(AttendanceReportRow(attendance=a, employee_name=employee.name, contact_number=employee.contact_number))
        return out


class InMemorySessions:
    def __init__(self):
        self.by_id: dict[str, RefreshSession] = {}

    def insert(self, *, tenant_id: str, token_hash: str, expires_at: datetime, created_at: datetime) -> RefreshSession:
        session = RefreshSession(
            session_id=str(uuid.uuid4()),
            tenant_id=tenant_id,
            token_hash=token_hash,
            expires_at=expires_at,
            is_revoked=False,
            created_at=created_at,
        )
        self.by_id[session.session_id] = session
        return session

    def get_by_hash(self, token_hash: str) -> Optional[RefreshSession]:
        return next((s for s in self.by_id.values() if s.token_hash == token_hash), None)

    def mark_revoked(self, session_id: str) -> bool:
        current = self.by_id.get(session_id)
        if current is None or current.is_revoked:
            return False
        self.by_id[session_id] = RefreshSession(**{**current.__dict__, "is_revoked": True})
        return True

    def revoke_by_tenant_and_hash(self, tenant_id: str, token_hash: str) -> int:
        session = self.get_by_hash(token_hash)
        if session is None or session.tenant_id != tenant_id:
            return 0
        return 1 if self.mark_revoked(session.session_id) else 0

    def rotate(self, *, old_session_id, tenant_id, new_token_hash, new_expires_at, created_at):
        if not self.mark_revoked(old_session_id):
            return None
        return self.insert(
            tenant_id=tenant_id, token_hash=new_token_hash, expires_at=new_expires_at, created_at=created_at
        )


class FakeFaceOracle:
    def __init__(self, similarity: float = 97.5, fail: bool = False):
        self.similarity = similarity
        self.fail = fail
        self.calls: list[tuple[str, str, float]] = []

    def compare(self, image_url_a: str, image_url_b: str, similarity_threshold: float) -> FaceComparison:
        self.calls.append((image_url_a, image_url_b, similarity_threshold))
        if self.fail:
            raise OracleFailure("Failed to compare faces")
        return FaceComparison(matched=self.similarity >= similarity_threshold, similarity=self.similarity)


class FakeObjectStore:
    def __init__(self):
        self.objects: dict[str, bytes] = {}

    def put(self, data: bytes, content_type: str, *, folder: str = "uploads") -> str:
        key = f"{folder}/{len(self.objects)}.jpg"
        self.objects[key] = data
        return f"https://bucket.s3.us-east-1.amazonaws.com/{key}"


class PlainHasher:
    """Keeps tests fast; the real hasher is covered separately."""

    def hash(self, plaintext: str) -> str:
        return "plain$" + plaintext

    def verify(self, plaintext: str, password_hash: str) -> bool:
        return password_hash == "plain$" + plaintext


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings.from_module(importlib.import_module("config.testing"))


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def tenants_repo() -> InMemoryTenants:
    return InMemoryTenants()


@pytest.fixture
def employees_repo() -> InMemoryEmployees:
    return InMemoryEmployees()


@pytest.fixture
def attendance_repo(employees_repo) -> InMemoryAttendance:
    return InMemoryAttendance(employees_repo)


@pytest.fixture
def sessions_repo() -> InMemorySessions:
    return InMemorySessions()


@pytest.fixture
def face_oracle() -> FakeFaceOracle:
    return FakeFaceOracle()


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def container(settings, clock, tenants_repo, employees_repo, attendance_repo, sessions_repo, face_oracle, object_store):
    return build_container(
        settings,
        tenants_repo=tenants_repo,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        sessions_repo=sessions_repo,
        face_oracle=face_oracle,
        object_store=object_store,
        password_hasher=PlainHasher(),
        clock=clock,
    )


@pytest.fixture
def make_tenant(tenants_repo):
    counter = {"n": 0}

    def _make(plan: PlanType = PlanType.FREE, *, latitude: float = OFFICE_LAT, longitude: float = OFFICE_LON) -> Tenant:
        counter["n"] += 1
        n = counter["n"]
        return tenants_repo.create(
            tenant_name=f"Acme {n}",
            gst=f"29ABCDE{n:04d}F1Z5",
            address="MG Road, Bengaluru",
            latitude=latitude,
            longitude=longitude,
            username=f"acme{n}",
            password_hash=PlainHasher().hash("s3cret-pass"),
            plan_type=plan,
        )

    return _make


@pytest.fixture
def make_employee(employees_repo):
    def _make(tenant: Tenant, name: str = "Asha") -> Employee:
        return employees_repo.create(
            tenant_id=tenant.tenant_id,
            name=name,
            photo_url=f"https://bucket.s3.us-east-1.amazonaws.com/employees/{name}.jpg",
            embedding=[0.1, 0.2, 0.3],
            salary=Decimal("50000.00"),
            emergency_contact_number="9000000001",
            contact_number="9000000002",
        )

    return _make


@pytest.fixture
def client(settings, container):
    app = create_app(settings, container)
    app.config["TESTING"] = True
    return app.test_client()
