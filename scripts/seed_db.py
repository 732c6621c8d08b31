from __future__ import annotations

import importlib
import logging

from config import get_settings_module

from class_attendance.database.bootstrap import ensure_demo_data
from class_attendance.database.connection import DBConfig, DatabaseConnection

logger = logging.getLogger("class_attendance.scripts.seed_db")


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    settings = importlib.import_module(get_settings_module())
    config = DBConfig.from_dict(dict(settings.DB_CONFIG))

    ensure_demo_data(DatabaseConnection(config))
    logger.info("Seeded demo users and Class A -> %s@%s:%s/%s", config.user, config.host, config.port, config.database)


if __name__ == "__main__":
    main()
