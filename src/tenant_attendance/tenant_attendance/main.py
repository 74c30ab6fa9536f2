from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from config import get_settings_module, load_settings

from .core.exceptions import DomainError
from .core.settings import AppSettings
from .database.bootstrap import apply_schema, list_tables
from .database.connection import DatabaseConnection, DBConfig

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .employees.controller import register as register_employees
from .integrations.controller import register as register_photos
from .tenants.controller import register as register_tenants

logger = logging.getLogger(__name__)


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return jsonify({"success": False, "message": str(e)}), e.http_status

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"success": False, "message": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error")
        message = f"Internal server error: {e}" if app.config.get("DEBUG") else "Internal server error"
        return jsonify({"success": False, "message": message}), 500


def create_app(settings: Optional[AppSettings] = None, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    if settings is None:
        settings = AppSettings.from_module(load_settings())

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not settings.debug:
        settings.require_secrets()

    app = Flask(__name__)
    app.secret_key = settings.secret_key
    app.config["DEBUG"] = settings.debug

    db = settings.db_config
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        get_settings_module(),
        db.get("user"),
        db.get("host"),
        db.get("port", 3306),
        db.get("database"),
    )

    if container is None:
        if settings.auto_init_db:
            conn = DatabaseConnection.get_instance(DBConfig.from_dict(db))
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(conn, schema_path=schema_path)
            logger.info("Schema ready (tables=%d)", len(list_tables(conn)))
        container = build_container(settings)

    register_tenants(app, container)
    register_employees(app, container)
    register_attendance(app, container)
    register_photos(app, container)
    _register_error_handlers(app)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "OK"})

    return app
