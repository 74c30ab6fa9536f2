from __future__ import annotations

from flask import Flask, g

from ..common.http import bearer_token, json_body, make_tenant_required, respond
from ..container import Container

# camelCase request keys -> service keyword arguments
_PROFILE_FIELDS = {
    "tenantName": "tenant_name",
    "gst": "gst",
    "address": "address",
    "latitude": "latitude",
    "longitude": "longitude",
    "planType": "plan_type",
}


def register(app: Flask, container: Container) -> None:
    tenant_required = make_tenant_required(container.auth_service)

    @app.route("/api/tenants/register", methods=["POST"], endpoint="tenant_register")
    def tenant_register():
        body = json_body()
        result = container.auth_service.register(
            tenant_name=body.get("tenantName"),
            gst=body.get("gst"),
            address=body.get("address"),
            latitude=body.get("latitude"),
            longitude=body.get("longitude"),
            username=body.get("username"),
            password=body.get("password"),
            plan_type=body.get("planType"),
        )
        return respond(result.to_dict(), message="Tenant registered successfully", status=201)

    @app.route("/api/tenants/login", methods=["POST"], endpoint="tenant_login")
    def tenant_login():
        body = json_body()
        result = container.auth_service.login(body.get("username"), body.get("password"))
        return respond(result.to_dict(), message="Login successful")

    @app.route("/api/tenants/refresh-token", methods=["POST"], endpoint="tenant_refresh_token")
    def tenant_refresh_token():
        body = json_body()
        result = container.auth_service.refresh(body.get("refreshToken") or "")
        return respond(result.to_dict(), message="Token refreshed successfully")

    @app.route("/api/tenants/logout", methods=["POST"], endpoint="tenant_logout")
    @tenant_required
    def tenant_logout():
        body = json_body()
        container.auth_service.logout(bearer_token(), body.get("refreshToken") or "")
        return respond(message="Logged out successfully")

    @app.route("/api/tenants/profile", methods=["GET"], endpoint="tenant_profile")
    @tenant_required
    def tenant_profile():
        tenant = container.profile_service.get_profile(g.tenant.tenant_id)
        return respond(tenant.to_public_dict())

    @app.route("/api/tenants/profile", methods=["PATCH"], endpoint="tenant_profile_update")
    @tenant_required
    def tenant_profile_update():
        body = json_body()
        changes = {_PROFILE_FIELDS.get(key, key): value for key, value in body.items()}
        tenant = container.profile_service.update_profile(g.tenant.tenant_id, changes)
        return respond(tenant.to_public_dict(), message="Profile updated successfully")
