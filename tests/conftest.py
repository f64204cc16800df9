import os
from datetime import date

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker

from trade_journal.config import Settings
from trade_journal.models.database import Base
from trade_journal.models.journal_settings import JournalSettingsRow  # noqa: F401
from trade_journal.services.normalization import normalize_journal_entry, normalize_trade


@pytest.fixture
def settings():
    """Test settings with dummy values."""
    return Settings(
        api_secret_key="test_secret",
        database_url="sqlite+aiosqlite:///:memory:",
        log_level="DEBUG",
        default_starting_balance=10000.0,
        default_projection_days=30,
        max_projection_days=365,
    )


@pytest.fixture
def make_trade():
    """Build a normalized closed trade; override any field by keyword."""
    counter = iter(range(1, 10_000))

    def _make(day: str, pnl: float, **fields):
        raw = {
            "id": f"t{next(counter)}",
            "date": day,
            "symbol": "ES",
            "type": "long",
            "entryPrice": 5000.0,
            "exitPrice": 5010.0,
            "pnl": pnl,
            "setup": "Breakout",
            "tags": ["A+"],
        }
        raw.update(fields)
        return normalize_trade(raw)

    return _make


@pytest.fixture
def make_entry():
    def _make(day: str, **fields):
        return normalize_journal_entry({"date": day, **fields})

    return _make


@pytest.fixture
def today():
    return date(2024, 3, 15)


@pytest_asyncio.fixture
async def db_engine():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    session_factory = async_sessionmaker(db_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_app(settings):
    """Create a test FastAPI app with state set directly instead of via lifespan."""
    os.environ.update({
        "API_SECRET_KEY": settings.api_secret_key,
        "DATABASE_URL": settings.database_url,
    })

    from trade_journal.main import app

    app.state.settings = settings

    engine = create_async_engine(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    app.state.engine = engine
    app.state.async_session = async_sessionmaker(engine, expire_on_commit=False)

    yield app

    await engine.dispose()


@pytest_asyncio.fixture
async def client(test_app):
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
