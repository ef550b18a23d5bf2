"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

import os

os.environ.setdefault("TELEPHONY_PROVIDER_TYPE", "mock")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import outreach.calls.models  # noqa: F401
from outreach.config import Settings
from outreach.contacts.models import Contact, ContactOutcome
from outreach.main import app
from outreach.shared.database import Base, get_db_session
from outreach.telephony.adapters.mock import MockTelephonyProvider
from outreach.telephony.config import OutcomeConfig, ProviderType, TelephonyConfig
from outreach.telephony.normalizer import OutcomeNormalizer


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        app_env="dev",
        debug=True,
        database_url="sqlite+aiosqlite:///:memory:",
    )


@pytest.fixture
def outcome_config() -> OutcomeConfig:
    return OutcomeConfig()


@pytest.fixture
def normalizer(outcome_config: OutcomeConfig) -> OutcomeNormalizer:
    return OutcomeNormalizer(outcome_config)


@pytest.fixture
def telephony_config() -> TelephonyConfig:
    return TelephonyConfig(
        provider_type=ProviderType.RETELL,
        retell_api_key="key_test_123456",
        retell_agent_id="agent_test",
        retell_from_number="+15550000000",
        retell_base_url="https://retell.test",
    )


@pytest.fixture
def mock_provider() -> MockTelephonyProvider:
    return MockTelephonyProvider()


@pytest_asyncio.fixture
async def db_engine(test_settings: Settings) -> AsyncGenerator[Any, None]:
    """Create test database engine (one shared in-memory connection)."""
    engine = create_async_engine(
        test_settings.database_url,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: Any) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def contact_c1(db_session: AsyncSession) -> Contact:
    """A pending contact with a known id."""
    contact = Contact(
        id="c1",
        name="Jane Doe",
        phone_number="+15551230001",
        services_offered="Lawn care",
        bill_or_payment="$250.00",
        last_outcome=ContactOutcome.PENDING,
        created_at=datetime(2024, 4, 2, 9, 30, tzinfo=timezone.utc),
    )
    db_session.add(contact)
    await db_session.commit()
    await db_session.refresh(contact)
    return contact


@pytest_asyncio.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    normalizer: OutcomeNormalizer,
    mock_provider: MockTelephonyProvider,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app with a test database and mock provider.

    Each request gets its own session, like in production.
    """

    async def _override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = _override_get_db_session
    app.state.outcome_normalizer = normalizer
    app.state.telephony_provider = mock_provider

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.pop(get_db_session, None)
    app.state.outcome_normalizer = None
    app.state.telephony_provider = None


@pytest.fixture
def load_contact(session_factory: async_sessionmaker[AsyncSession]) -> Any:
    """Read a contact through a fresh session (bypasses identity-map caching)."""

    async def _load(contact_id: str) -> Contact | None:
        async with session_factory() as session:
            return await session.get(Contact, contact_id)

    return _load
