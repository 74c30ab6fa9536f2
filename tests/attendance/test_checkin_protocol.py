from __future__ import annotations

import dataclasses
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from src.tenant_attendance.tenant_attendance.container import build_container
from src.tenant_attendance.tenant_attendance.core.enums import PlanType
from src.tenant_attendance.tenant_attendance.core.exceptions import (
    AlreadyCheckedInToday,
    EmployeeMismatch,
    EmployeeNotFound,
    FaceVerificationFailed,
    FaceVerificationUnavailable,
    InvalidCoordinates,
    InvalidEmbedding,
    InvalidOrExpiredLocationToken,
    TenantMismatch,
    ValidationError,
)

FAR_AWAY = (12.9850, 77.5946)  # ~1.5 km north of the office
NEAR = (12.9720, 77.5950)
SELFIE = "https://bucket.s3.us-east-1.amazonaws.com/attendance/selfie.jpg"
EMBEDDING = [0.11, 0.22, 0.33]


@pytest.fixture
def svc(container):
    return container.checkin_service


def _proof(svc, employee) -> str:
    result = svc.check_location(employee.employee_id, *FAR_AWAY)
    assert result.success
    return result.location_token


def test_no_proof_inside_office_radius(svc, make_tenant, make_employee):
    employee = make_employee(make_tenant())

    result = svc.check_location(employee.employee_id, *NEAR)

    assert result.success is False
    assert result.location_token is None
    assert "location_token" not in result.to_dict() and "locationToken" not in result.to_dict()


def test_proof_outside_radius_carries_tenant_details(svc, make_tenant, make_employee):
    tenant = make_tenant()
    employee = make_employee(tenant)

    result = svc.check_location(employee.employee_id, *FAR_AWAY)

    assert result.success is True
    assert result.location_token
    assert result.tenant_id == tenant.tenant_id
    assert result.tenant_name == tenant.tenant_name
    assert result.address == tenant.address


def test_location_check_rejects_bad_input(svc, make_tenant, make_employee):
    employee = make_employee(make_tenant())

    with pytest.raises(InvalidCoordinates):
        svc.check_location(employee.employee_id, 91, 0)
    with pytest.raises(EmployeeNotFound):
        svc.check_location("missing", *FAR_AWAY)


def test_free_plan_check_in_trusts_embedding(svc, make_tenant, make_employee, attendance_repo, face_oracle, clock):
    tenant = make_tenant(PlanType.FREE)
    employee = make_employee(tenant)

    attendance = svc.check_in(employee.employee_id, SELFIE, EMBEDDING, _proof(svc, employee))

    assert attendance.tenant_id == tenant.tenant_id
    assert attendance.employee_id == employee.employee_id
    assert attendance.match_confidence is None
    assert attendance.check_in_time == clock.now
    assert attendance.check_in_date == date(2026, 3, 2)
    assert attendance.embedding == tuple(EMBEDDING)
    assert face_oracle.calls == []
    assert len(attendance_repo.rows) == 1


def test_second_check_in_same_day_is_rejected(svc, make_tenant, make_employee, attendance_repo, clock):
    employee = make_employee(make_tenant())
    token = _proof(svc, employee)
    svc.check_in(employee.employee_id, SELFIE, EMBEDDING, token)

    clock.advance(minutes=2)
    # The proof is still valid; the once-per-day rule is what stops the replay.
    with pytest.raises(AlreadyCheckedInToday):
        svc.check_in(employee.employee_id, SELFIE, EMBEDDING, token)
    assert len(attendance_repo.rows) == 1


def test_unique_day_key_settles_a_lost_race(svc, make_tenant, make_employee, attendance_repo, monkeypatch):
    employee = make_employee(make_tenant())
    token = _proof(svc, employee)
    # Both requests pass the pre-check before either row is visible.
    monkeypatch.setattr(attendance_repo, "find_since", lambda employee_id, since: None)

    svc.check_in(employee.employee_id, SELFIE, EMBEDDING, token)
    with pytest.raises(AlreadyCheckedInToday):
        svc.check_in(employee.employee_id, SELFIE, EMBEDDING, token)
    assert len(attendance_repo.rows) == 1


def test_check_in_allowed_again_next_day(svc, make_tenant, make_employee, attendance_repo, clock):
    employee = make_employee(make_tenant())
    svc.check_in(employee.employee_id, SELFIE, EMBEDDING, _proof(svc, employee))

    clock.advance(days=1)
    svc.check_in(employee.employee_id, SELFIE, EMBEDDING, _proof(svc, employee))

    assert [a.check_in_date for a in attendance_repo.rows] == [date(2026, 3, 2), date(2026, 3, 3)]


def test_proof_is_bound_to_its_employee(svc, make_tenant, make_employee, attendance_repo):
    tenant = make_tenant()
    alice = make_employee(tenant, "Alice")
    bob = make_employee(tenant, "Bob")

    with pytest.raises(EmployeeMismatch):
        svc.check_in(bob.employee_id, SELFIE, EMBEDDING, _proof(svc, alice))
    assert attendance_repo.rows == []


def test_expired_proof_is_rejected(svc, make_tenant, make_employee, clock):
    employee = make_employee(make_tenant())
    token = _proof(svc, employee)

    clock.advance(minutes=5)
    with pytest.raises(InvalidOrExpiredLocationToken):
        svc.check_in(employee.employee_id, SELFIE, EMBEDDING, token)


def test_other_token_kinds_are_not_location_proofs(svc, container, make_tenant, make_employee):
    tenant = make_tenant()
    employee = make_employee(tenant)
    access = container.codec.issue_access(tenant_id=tenant.tenant_id, username=tenant.username, plan_type=tenant.plan_type)

    with pytest.raises(InvalidOrExpiredLocationToken):
        svc.check_in(employee.employee_id, SELFIE, EMBEDDING, access)
    with pytest.raises(InvalidOrExpiredLocationToken):
        svc.check_in(employee.employee_id, SELFIE, EMBEDDING, "garbage")


def test_proof_tenant_must_match_employee_tenant(svc, container, make_tenant, make_employee):
    employee = make_employee(make_tenant())
    other = make_tenant()
    forged = container.codec.issue_location(
        tenant_id=other.tenant_id, employee_id=employee.employee_id, latitude=FAR_AWAY[0], longitude=FAR_AWAY[1]
    )

    with pytest.raises(TenantMismatch):
        svc.check_in(employee.employee_id, SELFIE, EMBEDDING, forged)


@pytest.mark.parametrize("embedding", [None, [], ["a"], [True, 1.0], [float("nan")], [10**400], "0.1,0.2"])
def test_invalid_embedding_is_rejected(svc, make_tenant, make_employee, embedding):
    employee = make_employee(make_tenant())

    with pytest.raises(InvalidEmbedding):
        svc.check_in(employee.employee_id, SELFIE, embedding, _proof(svc, employee))


def test_photo_url_is_required(svc, make_tenant, make_employee):
    employee = make_employee(make_tenant())

    with pytest.raises(ValidationError):
        svc.check_in(employee.employee_id, "  ", EMBEDDING, _proof(svc, employee))


def test_paid_plan_records_oracle_similarity(svc, make_tenant, make_employee, face_oracle):
    employee = make_employee(make_tenant(PlanType.PAID))

    attendance = svc.check_in(employee.employee_id, SELFIE, EMBEDDING, _proof(svc, employee))

    assert attendance.match_confidence == pytest.approx(97.5)
    assert face_oracle.calls == [(employee.photo_url, SELFIE, 85.0)]


def test_paid_plan_rejects_low_similarity(svc, make_tenant, make_employee, face_oracle, attendance_repo):
    face_oracle.similarity = 60.0
    employee = make_employee(make_tenant(PlanType.PAID))

    with pytest.raises(FaceVerificationFailed) as exc:
        svc.check_in(employee.employee_id, SELFIE, EMBEDDING, _proof(svc, employee))

    assert not isinstance(exc.value, FaceVerificationUnavailable)
    assert attendance_repo.rows == []


def test_paid_plan_oracle_error_is_never_a_pass(svc, make_tenant, make_employee, face_oracle, attendance_repo):
    face_oracle.fail = True
    employee = make_employee(make_tenant(PlanType.PAID))

    with pytest.raises(FaceVerificationUnavailable) as exc:
        svc.check_in(employee.employee_id, SELFIE, EMBEDDING, _proof(svc, employee))

    assert exc.value.http_status == 502
    assert attendance_repo.rows == []


def test_day_boundary_follows_configured_timezone(
    settings, clock, tenants_repo, employees_repo, attendance_repo, sessions_repo, face_oracle, object_store,
    make_tenant, make_employee,
):
    ist = dataclasses.replace(settings, day_boundary_tz=ZoneInfo("Asia/Kolkata"))
    svc = build_container(
        ist,
        tenants_repo=tenants_repo,
        employees_repo=employees_repo,
        attendance_repo=attendance_repo,
        sessions_repo=sessions_repo,
        face_oracle=face_oracle,
        object_store=object_store,
        clock=clock,
    ).checkin_service
    employee = make_employee(make_tenant())

    clock.now = datetime(2026, 3, 2, 17, 0, tzinfo=timezone.utc)  # 22:30 IST, 2 March
    first = svc.check_in(employee.employee_id, SELFIE, EMBEDDING, _proof(svc, employee))
    clock.now = datetime(2026, 3, 2, 19, 0, tzinfo=timezone.utc)  # 00:30 IST, 3 March
    second = svc.check_in(employee.employee_id, SELFIE, EMBEDDING, _proof(svc, employee))

    assert first.check_in_date == date(2026, 3, 2)
    assert second.check_in_date == date(2026, 3, 3)
