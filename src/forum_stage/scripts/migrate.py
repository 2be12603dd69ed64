# src/forum_stage/scripts/migrate.py
"""Upgrade the configured database to the latest Alembic revision."""
from __future__ import annotations

import os

from alembic import command
from alembic.config import Config

from forum_stage.core.settings import settings

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..", ".."))


def build_config() -> Config:
    """Return an Alembic config pointing at the project's migrations folder."""
    cfg = Config(os.path.join(PROJECT_ROOT, "alembic.ini"))
    cfg.set_main_option("script_location", os.path.join(PROJECT_ROOT, "migrations"))
    cfg.set_main_option("sqlalchemy.url", settings.database_url_sync)
    return cfg


def run_upgrade_head() -> None:
    command.upgrade(build_config(), "head")


if __name__ == "__main__":
    run_upgrade_head()
