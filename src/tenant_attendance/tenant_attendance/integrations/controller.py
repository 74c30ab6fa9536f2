from __future__ import annotations

from flask import Flask, g, request

from ..common.http import make_tenant_required, respond
from ..container import Container
from ..core.exceptions import ValidationError


def _uploaded_photo():
    photo = request.files.get("photo")
    if photo is None or not photo.filename:
        raise ValidationError("Photo file is required")
    return photo.read(), (photo.mimetype or "").lower()


def register(app: Flask, container: Container) -> None:
    tenant_required = make_tenant_required(container.auth_service)

    @app.route("/api/photos/employee", methods=["POST"], endpoint="photo_upload_employee")
    @tenant_required
    def photo_upload_employee():
        data, content_type = _uploaded_photo()
        url = container.photo_service.upload_employee_photo(g.tenant.tenant_id, data, content_type)
        return respond({"photoUrl": url}, message="Photo uploaded successfully", status=201)

    @app.route("/api/photos/attendance", methods=["POST"], endpoint="photo_upload_attendance")
    def photo_upload_attendance():
        data, content_type = _uploaded_photo()
        url = container.photo_service.upload_attendance_photo(
            request.form.get("locationToken") or "", data, content_type
        )
        return respond({"photoUrl": url}, message="Photo uploaded successfully", status=201)
