"""Pytest configuration and shared fixtures."""

import logging

import pytest

from pms.core import db_client
from pms.core.config import settings


logger = logging.getLogger(__name__)


@pytest.fixture
async def sqlite_db(tmp_path, monkeypatch):
    """A real SQLite database with the full schema, in a temporary directory."""
    db_path = tmp_path / "pms_test.db"
    monkeypatch.setattr(settings, "sqlite_db_path", str(db_path))

    await db_client.init_db()
    logger.info("Test database initialized at %s", db_path)
    yield db_path

    await db_client.close_connection()
