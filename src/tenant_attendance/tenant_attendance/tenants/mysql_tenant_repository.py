from __future__ import annotations

import uuid
from typing import Any, Dict, Mapping, Optional

import mysql.connector

from ..common.datetime_utils import from_db
from ..core.enums import PlanType
from ..core.exceptions import TaxIdTaken, UsernameTaken
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_name, fetchone
from .model import Tenant
from .repository import TenantRepository

_COLUMNS = """
    tenant_id, tenant_name, gst, address, latitude, longitude,
    username, password_hash, plan_type, created_at, updated_at
"""

# Domain field -> column; only these may be changed through `update`.
_UPDATABLE = {
    "tenant_name": "tenant_name",
    "gst": "gst",
    "address": "address",
    "latitude": "latitude",
    "longitude": "longitude",
    "plan_type": "plan_type",
}


def _row_to_tenant(r: Dict[str, Any]) -> Tenant:
    return Tenant(
        tenant_id=str(r["tenant_id"]),
        tenant_name=r["tenant_name"],
        gst=r["gst"],
        address=r["address"],
        latitude=float(r["latitude"]),
        longitude=float(r["longitude"]),
        username=r["username"],
        password_hash=r["password_hash"],
        plan_type=PlanType(r["plan_type"]),
        created_at=from_db(r.get("created_at")),
        updated_at=from_db(r.get("updated_at")),
    )


def _raise_conflict(exc: mysql.connector.IntegrityError) -> None:
    key = duplicate_key_name(exc)
    if key == "uq_tenants_username":
        raise UsernameTaken("Username already exists") from exc
    if key == "uq_tenants_gst":
        raise TaxIdTaken("GST number already registered") from exc


class MySQLTenantRepository(TenantRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_one(self, where: str, value: Any) -> Optional[Tenant]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tenants WHERE {where}=%s", (value,))
            r = fetchone(cur)
            return _row_to_tenant(r) if r else None

    def get_by_id(self, tenant_id: str) -> Optional[Tenant]:
        return self._get_one("tenant_id", tenant_id)

    def get_by_username(self, username: str) -> Optional[Tenant]:
        return self._get_one("username", username)

    def get_by_gst(self, gst: str) -> Optional[Tenant]:
        return self._get_one("gst", gst)

    def create(
        self,
        *,
        tenant_name: str,
        gst: str,
        address: str,
        latitude: float,
        longitude: float,
        username: str,
        password_hash: str,
        plan_type: PlanType,
    ) -> Tenant:
        tenant_id = str(uuid.uuid4())
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO tenants(tenant_id, tenant_name, gst, address, latitude, longitude,
                                        username, password_hash, plan_type)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (tenant_id, tenant_name, gst, address, latitude, longitude, username, password_hash, plan_type.value),
                )
        except mysql.connector.IntegrityError as e:
            _raise_conflict(e)
            raise

        created = self.get_by_id(tenant_id)
        if created is None:
            raise RuntimeError(f"Tenant {tenant_id} vanished right after insert")
        return created

    def update(self, tenant_id: str, changes: Mapping[str, Any]) -> Optional[Tenant]:
        sets: list[str] = []
        params: list[object] = []
        for field_name, value in changes.items():
            column = _UPDATABLE.get(field_name)
            if column is None:
                raise KeyError(f"Field {field_name!r} is not updatable")
            sets.append(f"{column}=%s")
            params.append(value.value if isinstance(value, PlanType) else value)

        if sets:
            params.append(tenant_id)
            try:
                with db_cursor(self._conn_factory) as (_, cur):
                    cur.execute(f"UPDATE tenants SET {', '.join(sets)} WHERE tenant_id=%s", tuple(params))
            except mysql.connector.IntegrityError as e:
                _raise_conflict(e)
                raise

        return self.get_by_id(tenant_id)

    def delete_by_id(self, tenant_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM tenants WHERE tenant_id=%s", (tenant_id,))
            return cur.rowcount > 0
