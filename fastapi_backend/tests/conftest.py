"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- An in-memory stand-in for the database executor
- FastAPI test client
- Signed tokens for a regular user and an admin
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("BCRYPT_WORK_FACTOR", "4")

import pytest
from fastapi.testclient import TestClient

from jobly import db
from jobly.auth_utils import create_access_token
from jobly.main import app


class FakeDB:
    """
    Records every statement and answers with queued results.

    ``results`` is consumed in call order; when it runs dry each executor
    function falls back to an empty answer. A queued exception is raised
    instead of returned.
    """

    def __init__(self):
        self.calls = []
        self.results = []

    def queue(self, *results):
        self.results.extend(results)

    def _answer(self, name, query, params, default):
        self.calls.append((name, query, list(params or [])))
        if self.results:
            result = self.results.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        return default

    def fetch_one(self, query, params=None):
        return self._answer("fetch_one", query, params, None)

    def fetch_all(self, query, params=None):
        return self._answer("fetch_all", query, params, [])

    def execute_returning(self, query, params=None):
        return self._answer("execute_returning", query, params, None)


@pytest.fixture
def fake_db(monkeypatch):
    """Swap the executor functions in ``jobly.db`` for a FakeDB."""
    fake = FakeDB()
    for name in ("fetch_one", "fetch_all", "execute_returning"):
        monkeypatch.setattr(db, name, getattr(fake, name))
    monkeypatch.setattr(db, "init_db_pool", lambda: None)
    monkeypatch.setattr(db, "close_db_pool", lambda: None)
    return fake


@pytest.fixture
def client(fake_db):
    """FastAPI test client backed by the fake database."""
    yield TestClient(app)


@pytest.fixture
def user_token():
    return create_access_token("testuser", False)


@pytest.fixture
def admin_token():
    return create_access_token("admin", True)


@pytest.fixture
def sample_company():
    return {
        "handle": "EARTH",
        "name": "Planet Earth",
        "employees": 13,
        "description": "Third rock from the sun",
        "logo_url": None,
    }


@pytest.fixture
def sample_job():
    return {
        "id": 1,
        "title": "CEO",
        "salary": 100.01,
        "equity": 0.3,
        "company_handle": "EARTH",
        "date_posted": "2020-01-01T00:00:00+00:00",
    }


@pytest.fixture
def sample_user():
    return {
        "username": "testuser",
        "first_name": "Test",
        "last_name": "User",
        "email": "test@example.com",
        "photo_url": None,
    }
