from __future__ import annotations

from flask import Flask, g, request

from ..common.http import json_body, make_tenant_required, respond
from ..container import Container

_EMPLOYEE_FIELDS = {
    "name": "name",
    "photoUrl": "photo_url",
    "embedding": "embedding",
    "salary": "salary",
    "emergencyContactNumber": "emergency_contact_number",
    "contactNumber": "contact_number",
}


def register(app: Flask, container: Container) -> None:
    tenant_required = make_tenant_required(container.auth_service)

    @app.route("/api/employees", methods=["POST"], endpoint="employee_create")
    @tenant_required
    def employee_create():
        body = json_body()
        employee = container.employee_service.register(
            g.tenant.tenant_id,
            name=body.get("name"),
            photo_url=body.get("photoUrl"),
            embedding=body.get("embedding"),
            salary=body.get("salary"),
            emergency_contact_number=body.get("emergencyContactNumber"),
            contact_number=body.get("contactNumber"),
        )
        return respond(employee.to_dict(), message="Employee registered successfully", status=201)

    @app.route("/api/employees", methods=["GET"], endpoint="employee_list")
    @tenant_required
    def employee_list():
        page = container.employee_service.list(
            g.tenant.tenant_id,
            page=request.args.get("page", 1),
            limit=request.args.get("limit"),
            search=request.args.get("search"),
        )
        return respond(
            {
                "employees": [e.to_dict() for e in page.items],
                "pagination": {
                    "total": page.total,
                    "page": page.page,
                    "limit": page.limit,
                    "totalPages": page.total_pages,
                },
            }
        )

    @app.route("/api/employees/<employee_id>", methods=["GET"], endpoint="employee_detail")
    @tenant_required
    def employee_detail(employee_id: str):
        details = container.employee_service.get_details(g.tenant.tenant_id, employee_id)
        data = details.employee.to_dict()
        data["attendances"] = [a.to_dict() for a in details.recent_attendance]
        return respond(data)

    @app.route("/api/employees/<employee_id>", methods=["PATCH"], endpoint="employee_update")
    @tenant_required
    def employee_update(employee_id: str):
        body = json_body()
        changes = {_EMPLOYEE_FIELDS.get(key, key): value for key, value in body.items()}
        employee = container.employee_service.update(g.tenant.tenant_id, employee_id, changes)
        return respond(employee.to_dict(), message="Employee updated successfully")

    @app.route("/api/employees/<employee_id>", methods=["DELETE"], endpoint="employee_delete")
    @tenant_required
    def employee_delete(employee_id: str):
        container.employee_service.delete(g.tenant.tenant_id, employee_id)
        return respond(message="Employee deleted successfully")
