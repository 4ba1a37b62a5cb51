"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Test Database Configuration:
    Tests run against SQLite. ``db_session`` uses a fresh in-memory
    database per test; ``file_session_factory`` uses a file-backed
    database so several sessions can run against it concurrently.

Secrets are set through the environment before any configuration is
loaded. Provider credentials are blanked so AI and Telegram features
start disabled; tests that need them set them explicitly.
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path

os.environ["JWT_SECRET"] = "test-jwt-secret-that-is-long-enough-for-checks"
os.environ["DATABASE_URL"] = ""
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["GROQ_API_KEY"] = ""
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["TELEGRAM_WEBHOOK_SECRET"] = ""

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, StaticPool

import messenger.backend.models  # noqa: F401
from messenger.backend.core.config import get_app_config
from messenger.backend.core.database import _enable_sqlite_foreign_keys
from messenger.backend.core.security import hash_password
from messenger.backend.models.account import Account
from messenger.backend.models.base import Base

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="session", autouse=True)
def fast_password_hashing() -> None:
    """Minimum bcrypt cost for the whole run."""
    get_app_config().security.password.bcrypt_rounds = 4


# =============================================================================
# Database Engine Fixtures
# =============================================================================


def _sqlite_engine(url: str, **kwargs) -> AsyncEngine:
    engine = create_async_engine(url, echo=False, **kwargs)
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables, one per test."""
    engine = _sqlite_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def db_session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(
    db_session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a database session for a single test.

    The database is discarded with the engine, so tests may commit freely.
    """
    async with db_session_factory() as session:
        yield session


@pytest.fixture
async def file_session_factory(
    tmp_path: Path,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """
    Session factory over a file-backed SQLite database.

    Each session gets its own connection, so concurrent sessions contend
    for the database lock the way separate requests would.
    """
    engine = _sqlite_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'concurrency.db'}",
        poolclass=NullPool,
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


# =============================================================================
# Account Fixtures
# =============================================================================


AccountFactory = Callable[..., Awaitable[Account]]


async def create_account(
    session: AsyncSession,
    email: str = "ana@example.com",
    plan: str = "free",
    **fields,
) -> Account:
    """Insert and commit an account with ``TEST_PASSWORD``."""
    account = Account(
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        plan=plan,
        **fields,
    )
    session.add(account)
    await session.commit()
    return account


@pytest.fixture
def make_account(db_session: AsyncSession) -> AccountFactory:
    """
    Factory for accounts in ``db_session``.

    Usage:
        async def test_limits(make_account):
            account = await make_account(plan="paid")
    """

    async def _make(**kwargs) -> Account:
        return await create_account(db_session, **kwargs)

    return _make


@pytest.fixture
async def account(make_account: AccountFactory) -> Account:
    """A free-plan account."""
    return await make_account(name="Ana", specialty="wedding photographer")


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture
def anyio_backend() -> str:
    """Specify the async backend for anyio."""
    return "asyncio"
