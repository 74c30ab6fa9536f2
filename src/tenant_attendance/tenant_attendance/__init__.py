"""Tenant Attendance package.

Multi-tenant attendance API organized by feature modules (tenants, employees,
attendance, ...) with a thin Flask controller layer over service/repository
layers. Employees check in with a two-phase geofence + identity protocol.
"""
