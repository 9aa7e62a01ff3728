"""Create the attendance database (if missing) and apply database/schema.sql.

Usage: python scripts/init_db.py [path/to/schema.sql]
"""

from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.class_attendance.class_attendance.core.logging import PACKAGE_LOGGER, configure_logging
from src.class_attendance.class_attendance.database.bootstrap import apply_schema, list_tables

logger = logging.getLogger(f"{PACKAGE_LOGGER}.scripts.init_db")


def main(argv: list[str]) -> int:
    settings = importlib.import_module(get_settings_module())
    configure_logging(level=str(getattr(settings, "LOG_LEVEL", "INFO")))
    db_config = dict(settings.DB_CONFIG)

    schema_path = Path(argv[0]) if argv else REPO_ROOT / "database" / "schema.sql"
    if not schema_path.is_file():
        logger.error("schema file not found: %s", schema_path)
        return 1

    apply_schema(db_config, schema_path=schema_path)
    tables = list_tables(db_config)
    logger.info(
        "schema applied database=%s tables=%s",
        db_config.get("database"), ", ".join(sorted(tables)),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
