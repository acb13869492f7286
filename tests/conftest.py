"""
tests/conftest.py — Shared fixtures: the sample content database on disk.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from src.content.store import ContentStore
from src.services.content_service import ContentConfig, ContentService
from tests.content_fixtures import SAMPLE, build_content_db


@pytest.fixture
def content_db(tmp_path) -> Path:
    return build_content_db(tmp_path / "content.sqlite3", SAMPLE)


@pytest.fixture
def store(content_db):
    s = ContentStore(str(content_db))
    s.open()
    yield s
    s.close()


@pytest.fixture
def service(content_db):
    svc = ContentService(ContentConfig(db_path=str(content_db)))
    yield svc
    svc.close()
