"""
Shared fixtures: in-memory SQLite database rebuilt for every test
"""

import os
import sys
import tempfile
from pathlib import Path

# Settings must be in place before config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_EMAILS"] = "admin@resort.test"
os.environ["LOG_FILE"] = str(Path(tempfile.gettempdir()) / "resort_bookings_tests.log")

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from fastapi.testclient import TestClient

from database.connection import Base, SessionLocal, engine
import models  # noqa: F401
from main import app


ADMIN_HEADERS = {"X-Operator-Email": "admin@resort.test"}
STAFF_HEADERS = {"X-Operator-Email": "frontdesk@resort.test"}


@pytest.fixture(autouse=True)
def reset_database():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def admin_headers():
    return dict(ADMIN_HEADERS)


@pytest.fixture
def staff_headers():
    return dict(STAFF_HEADERS)
