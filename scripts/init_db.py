from __future__ import annotations

import importlib
import logging
from pathlib import Path

from config import get_settings_module

from class_attendance.database.bootstrap import apply_schema, list_tables
from class_attendance.database.connection import DBConfig, DatabaseConnection

logger = logging.getLogger("class_attendance.scripts.init_db")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = importlib.import_module(get_settings_module())
    config = DBConfig.from_dict(dict(settings.DB_CONFIG))
    conn = DatabaseConnection(config)

    schema_path = Path(__file__).resolve().parents[1] / "database" / "schema.sql"
    apply_schema(conn, schema_path=schema_path)
    logger.info(
        "Applied schema.sql -> %s@%s:%s/%s (tables=%s)",
        config.user,
        config.host,
        config.port,
        config.database,
        len(list_tables(conn)),
    )


if __name__ == "__main__":
    main()
