# tests/test_migrate.py
"""Tests for the Alembic helper script."""

import os

from alembic.script import ScriptDirectory

from forum_stage.core.settings import settings
from forum_stage.scripts.migrate import build_config


def test_build_config_points_at_project_migrations() -> None:
    cfg = build_config()

    assert os.path.isdir(cfg.get_main_option("script_location"))
    assert cfg.get_main_option("sqlalchemy.url") == settings.database_url_sync


def test_single_head_revision() -> None:
    script = ScriptDirectory.from_config(build_config())

    assert script.get_heads() == ["5c1f0a9e2b71"]
