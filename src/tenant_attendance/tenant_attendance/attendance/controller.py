from __future__ import annotations

from flask import Flask, g, request

from ..common.http import json_body, make_tenant_required, query_date, respond
from ..container import Container


def register(app: Flask, container: Container) -> None:
    tenant_required = make_tenant_required(container.auth_service)

    # Employee-facing endpoints: no tenant session, the location proof binds phase 2 to phase 1.
    @app.route("/api/attendance/location-check", methods=["POST"], endpoint="attendance_location_check")
    def attendance_location_check():
        body = json_body()
        result = container.checkin_service.check_location(
            body.get("employeeId") or "",
            body.get("latitude"),
            body.get("longitude"),
        )
        # A denial inside the radius is a normal outcome, not an error.
        return respond(result.to_dict(), message=result.message)

    @app.route("/api/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    def attendance_check_in():
        body = json_body()
        attendance = container.checkin_service.check_in(
            body.get("employeeId") or "",
            body.get("photoUrl"),
            body.get("embedding"),
            body.get("locationToken") or "",
        )
        return respond(attendance.to_dict(), message="Attendance marked successfully", status=201)

    @app.route("/api/attendance/employee/<employee_id>", methods=["GET"], endpoint="attendance_for_employee")
    @tenant_required
    def attendance_for_employee(employee_id: str):
        page = container.attendance_query_service.list_for_employee(
            g.tenant.tenant_id,
            employee_id,
            start=query_date("startDate"),
            end=query_date("endDate"),
            page=request.args.get("page", 1),
            limit=request.args.get("limit"),
        )
        return respond(
            {
                "attendances": [a.to_dict() for a in page.items],
                "pagination": {
                    "total": page.total,
                    "page": page.page,
                    "limit": page.limit,
                    "totalPages": page.total_pages,
                },
            }
        )

    @app.route("/api/attendance/report", methods=["GET"], endpoint="attendance_report")
    @tenant_required
    def attendance_report():
        rows = container.attendance_query_service.report(
            g.tenant.tenant_id,
            start=query_date("startDate"),
            end=query_date("endDate"),
            employee_id=request.args.get("employeeId"),
        )
        return respond({"report": [row.to_dict() for row in rows], "total": len(rows)})
