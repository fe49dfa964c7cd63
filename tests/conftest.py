import asyncio
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from secure_app.core.config import Settings
from secure_app.core.security import PasswordHasher
from secure_app.db.session import Database
from secure_app.main import create_app
from secure_app.models.user import Role
from secure_app.services import users as user_store

TEST_SECRET = "test-session-secret-0123456789-abcdefghij"


def make_settings(tmp_path: Path, **overrides) -> Settings:
    values = dict(
        session_secret=TEST_SECRET,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        password_time_cost=1,
        password_memory_cost=1024,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture()
def hasher() -> PasswordHasher:
    return PasswordHasher(time_cost=1, memory_cost=1024)


@pytest.fixture()
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def run_db(settings: Settings):
    """Run ``fn(session)`` against the test database on a private engine and commit."""

    def _run(fn):
        async def _go():
            database = Database(settings.sqlalchemy_url)
            try:
                await database.create_all()
                async with database.session() as session:
                    result = await fn(session)
                    await session.commit()
                    return result
            finally:
                await database.dispose()

        return asyncio.run(_go())

    return _run


@pytest.fixture()
def seed_user(run_db, hasher: PasswordHasher):
    """Insert a user row directly, bypassing the HTTP validation rules."""

    def _seed(email: str, password: str, role: Role = Role.USER) -> int:
        async def _create(session):
            user = await user_store.create_user(session, email, hasher.hash(password), role=role)
            return user.id

        return run_db(_create)

    return _seed
