from __future__ import annotations

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from habitsync.db import ensure_sqlite_dir
from habitsync.logging_utils import configure_logging
from habitsync.settings import settings

logger = logging.getLogger("habitsync.init_db")


def main() -> None:
    configure_logging()
    project_root = Path(__file__).resolve().parents[1]
    alembic_ini = project_root / "alembic.ini"
    if not alembic_ini.exists():
        raise RuntimeError(f"alembic.ini not found at: {alembic_ini}")

    ensure_sqlite_dir(settings.DATABASE_URL)
    cfg = Config(str(alembic_ini))
    cfg.set_main_option("script_location", str(project_root / "alembic"))
    command.upgrade(cfg, "head")
    logger.info("DB migrated (alembic upgrade head).")


if __name__ == "__main__":
    main()
