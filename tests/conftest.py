"""
Shared test setup.
Environment must be in place before anything imports config.settings.
"""
from __future__ import annotations

import os

os.environ.setdefault("ENV",            "test")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-unit-tests-only")
os.environ.setdefault("DATABASE_URI",   "sqlite://")
os.environ.setdefault("LOG_TO_FILE",    "false")
os.environ.setdefault("BCRYPT_ROUNDS",  "4")

import pytest
from sqlalchemy.pool import StaticPool
from sqlalchemy import create_engine

from storage.database import init_db


@pytest.fixture()
def engine():
    """Fresh in-memory database per test, shared across threads."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(eng)
    yield eng
    eng.dispose()
