from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.constants import DEFAULT_REPORT_DAYS
from .core.exceptions import (
    DomainError,
    LedgerInconsistencyError,
    NotFoundError,
    StorageUnavailable,
    ValidationError,
)
from .core.logging import configure_logging
from .database.bootstrap import apply_schema, list_tables
from .reports.controller import register as register_reports

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (StorageUnavailable, 503),
    (LedgerInconsistencyError, 500),
)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = next((code for kind, code in _STATUS_BY_ERROR if isinstance(exc, kind)), 400)
        body = {"error": type(exc).__name__, "message": str(exc)}
        if isinstance(exc, StorageUnavailable):
            body["retryable"] = True
        return jsonify(body), status


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["DEFAULT_REPORT_DAYS"] = int(getattr(settings, "DEFAULT_REPORT_DAYS", DEFAULT_REPORT_DAYS))

    configure_logging(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")),
        json=bool(getattr(settings, "LOG_JSON", False)),
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module, db_config.get("user"), db_config.get("host"),
            db_config.get("port", 3306), db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        container = build_container(
            db_config=db_config,
            view_order=getattr(settings, "VIEW_ORDER", "enrollment"),
            cache_views=bool(getattr(settings, "VIEW_CACHE", False)),
        )

    register_error_handlers(app)
    register_attendance(app, container)
    register_reports(app, container)

    return app
