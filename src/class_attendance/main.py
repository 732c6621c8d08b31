from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .classes.controller import register as register_classes
from .common.http import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_MAX_UPLOAD_MB, DEFAULT_TOKEN_TTL_HOURS
from .database.bootstrap import apply_schema, ensure_demo_data, list_tables
from .database.connection import DBConfig, DatabaseConnection
from .resources.controller import register as register_resources
from .resources.storage import LocalFileStore
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[2]


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    With no ``container`` the settings module picked by ``APP_ENV`` decides the
    database, secret and upload directory. Tests pass a container wired over
    in-memory repositories instead.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    max_upload_mb = int(getattr(settings, "MAX_UPLOAD_MB", DEFAULT_MAX_UPLOAD_MB))
    # Slack for multipart framing; the file store enforces the exact per-file limit.
    app.config["MAX_CONTENT_LENGTH"] = (max_upload_mb + 1) * 1024 * 1024

    if container is None:
        db_config = dict(getattr(settings, "DB_CONFIG"))
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(conn, schema_path=REPO_ROOT / "database" / "schema.sql")
            logger.info("Schema ready (tables=%s)", len(list_tables(conn)))
        if getattr(settings, "AUTO_SEED_DB", False):
            ensure_demo_data(conn)
            logger.info("Demo data ready")

        upload_dir = Path(getattr(settings, "UPLOAD_DIR", REPO_ROOT / "uploads"))
        container = build_container(
            db_config=db_config,
            secret_key=app.secret_key,
            token_ttl_hours=int(getattr(settings, "TOKEN_TTL_HOURS", DEFAULT_TOKEN_TTL_HOURS)),
            file_store=LocalFileStore(upload_dir, max_bytes=max_upload_mb * 1024 * 1024),
        )

    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)
    register_classes(app, container)
    register_resources(app, container)

    return app
