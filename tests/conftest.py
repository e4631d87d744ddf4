"""Shared test fixtures."""

from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from payrail.config import settings
from payrail.db.base import Base
# Import all models to register with Base.metadata
import payrail.db.models  # noqa: F401
from payrail.db.models import ClientRow, DeviceTokenRow, DocumentRow, MilestoneRow, UserRow

from fakes import EVM_WALLET, SOLANA_WALLET, TEST_API_KEY, FakeCustody, FakePush


@pytest.fixture(autouse=True)
def _settings(monkeypatch):
    """Pin the settings the webhook pipeline reads."""
    monkeypatch.setattr(settings, "custody_api_key", TEST_API_KEY)
    monkeypatch.setattr(settings, "custody_wallet_id", "wallet_test")
    monkeypatch.setattr(settings, "platform_fee_rate", Decimal("0.005"))
    monkeypatch.setattr(settings, "offramp_webhook_secret", "")
    monkeypatch.setattr(settings, "environment", "development")


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def custody():
    return FakeCustody()


@pytest.fixture
def push():
    return FakePush()


@pytest.fixture
async def user(db_session):
    """A freelancer with both wallets, a custody address and a push device."""
    row = UserRow(
        user_id="usr_test",
        email="freelancer@example.com",
        display_name="Ada",
        custody_address_id="addr_test",
        custody_address="0xcustody",
        evm_wallet_address=EVM_WALLET,
        solana_wallet_address=SOLANA_WALLET,
    )
    db_session.add(row)
    db_session.add(
        DeviceTokenRow(
            device_token_id="dev_test",
            user_id="usr_test",
            push_token="ExponentPushToken[abc123]",
            platform="ios",
        )
    )
    await db_session.commit()
    return row


@pytest.fixture
async def document(db_session, user):
    """An unpaid $100 invoice for a client, tied to a project milestone."""
    db_session.add(
        ClientRow(
            client_id="cli_test",
            user_id=user.user_id,
            name="Acme",
            email="ap@acme.test",
            total_earnings=Decimal("0"),
            outstanding_balance=Decimal("100"),
        )
    )
    await db_session.flush()
    doc = DocumentRow(
        document_id="doc_test",
        user_id=user.user_id,
        client_id="cli_test",
        doc_type="INVOICE",
        status="SENT",
        title="Website redesign",
        amount=Decimal("100"),
        currency="USDC",
        content={"milestone_id": "ms_test"},
    )
    db_session.add(doc)
    await db_session.flush()
    db_session.add(
        MilestoneRow(
            milestone_id="ms_test",
            project_id="prj_test",
            title="Design phase",
            amount=Decimal("100"),
            status="invoiced",
            invoice_id="doc_test",
        )
    )
    await db_session.commit()
    return doc


@pytest.fixture
def app(session_factory, db_engine, custody, push):
    """Create a test application instance with in-memory DB and fake providers."""
    from payrail.main import create_app

    _app = create_app()
    _app.state.db_engine = db_engine
    _app.state.db_session_factory = session_factory
    _app.state.custody_client = custody
    _app.state.push_sender = push
    _app.state.catalog_cache = None
    return _app


@pytest.fixture
async def client(app):
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
