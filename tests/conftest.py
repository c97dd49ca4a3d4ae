"""Pytest fixtures for TeamPulse tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from teampulse.api.app import create_app
from teampulse.config import Settings
from teampulse.database import create_schema
from teampulse.models import Budget, User, UserRole, utcnow
from teampulse.services.auth_service import AuthService, create_access_token

# Use in-memory SQLite for tests (with async support)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "password123"


def make_settings(**overrides) -> Settings:
    """Settings for an isolated test app."""
    values = dict(
        database_url=TEST_DATABASE_URL,
        jwt_secret="test-secret",
        jwt_expires_in="1h",
        bcrypt_rounds=4,
        env="test",
        debug=False,
        host="127.0.0.1",
        port=3001,
        cors_origin="http://test",
        log_level="WARNING",
        login_rate_limit=5,
        login_rate_window=300,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """App bound to a fresh in-memory database with the schema created."""
    app = create_app(settings)
    await create_schema(app.state.engine)
    yield app
    await app.state.engine.dispose()


@pytest.fixture
def db(app: FastAPI) -> async_sessionmaker[AsyncSession]:
    """Session factory for test setup and assertions.

    Open a short-lived session per step so reads never see stale state.
    """
    return app.state.session_factory


@pytest_asyncio.fixture
async def session(db: async_sessionmaker[AsyncSession]) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with db() as session:
        yield session
        await session.rollback()


MakeUser = Callable[..., Awaitable[User]]


@pytest.fixture
def make_user(db: async_sessionmaker[AsyncSession], settings: Settings) -> MakeUser:
    """Factory creating a committed user, optionally with a budget."""

    async def _make(
        name: str = "Test User",
        role: UserRole = UserRole.USER,
        *,
        email: str | None = None,
        password: str = DEFAULT_PASSWORD,
        department: str | None = "Engineering",
        total: str | int | None = None,
        monthly: str | int | None = None,
        used: str | int = 0,
        reset_date: datetime | None = None,
    ) -> User:
        async with db() as session:
            user = await AuthService(session, settings).register(
                name=name,
                email=email or f"{name.split()[0].lower()}-{uuid4().hex[:6]}@example.com",
                password=password,
                department=department,
                role=role,
            )
            if total is not None or monthly is not None:
                session.add(
                    Budget(
                        user_id=user.id,
                        total_budget=Decimal(str(total or 0)),
                        monthly_budget=Decimal(str(monthly or 0)),
                        used_budget=Decimal(str(used)),
                        reset_date=reset_date or utcnow(),
                    )
                )
            await session.commit()
            return user

    return _make


@pytest.fixture
def auth_headers(settings: Settings) -> Callable[[User], dict[str, str]]:
    """Bearer headers for a user."""

    def _headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user, settings)}"}

    return _headers
