import os
import tempfile
from pathlib import Path

# Settings are read at import time; point them at a throwaway database first.
_TMP_DIR = Path(tempfile.mkdtemp(prefix="doukeeper-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'app.db'}"
os.environ["AUTH_SECRET"] = "test-secret"

import uuid

import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool


@pytest.fixture()
def db_url(tmp_path):
    """File-backed SQLite database with all tables created."""
    from db.database import Base
    from db import distribution, event, ledger_version, users, work  # noqa: F401

    path = tmp_path / "ledger.db"
    sync_engine = create_engine(f"sqlite:///{path}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()
    return f"sqlite+aiosqlite:///{path}"


@pytest.fixture()
def session_maker(db_url):
    engine = create_async_engine(db_url, poolclass=NullPool)
    return async_sessionmaker(engine, expire_on_commit=False)


def _make_user(email: str):
    from db.users import User

    return User(
        id=uuid.uuid4(),
        email=email,
        hashed_password="not-used",
        is_active=True,
        is_superuser=False,
        is_verified=True,
    )


@pytest.fixture()
def users():
    return {"alice": _make_user("alice@example.com"), "bob": _make_user("bob@example.com")}


@pytest.fixture()
def login_as(users):
    current = {"user": users["alice"]}

    def _login(name: str):
        current["user"] = users[name]

    _login.current = current
    return _login


@pytest.fixture()
def client(session_maker, login_as):
    from fastapi.testclient import TestClient

    from core.auth import current_active_user
    from db.database import get_async_session
    from main import app

    async def override_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    app.dependency_overrides[current_active_user] = lambda: login_as.current["user"]
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
