"""Shared test fixtures."""

import os
import tempfile
from collections.abc import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# Settings are read at import time, so configure them before importing the app
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-jwt")
os.environ.setdefault(
    "DATABASE_URL",
    f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'templecms-test.db')}",
)
os.environ.setdefault("PAYU_MERCHANT_KEY", "testkey")
os.environ.setdefault("PAYU_MERCHANT_SALT", "testsalt")
os.environ.setdefault("PAYU_MODE", "test")
os.environ.setdefault("BREVO_API_KEY", "")
os.environ.setdefault("S3_BUCKET", "temple-test")

import templecms.models  # noqa: E402,F401
from templecms.db.base import Base  # noqa: E402
from templecms.db.session import async_session_factory  # noqa: E402
from templecms.db.session import engine as app_engine  # noqa: E402
from templecms.main import app  # noqa: E402
from templecms.services import receipts  # noqa: E402


@pytest.fixture(autouse=True)
async def schema() -> AsyncGenerator[None, None]:
    """Fresh tables for every test; the pool is disposed afterwards."""
    async with app_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await app_engine.dispose()


@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    """Session on the app engine for seeding and asserting rows directly."""
    async with async_session_factory() as session:
        yield session


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client for the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def sent_emails(monkeypatch: pytest.MonkeyPatch) -> dict[str, list]:
    """Capture outgoing receipt and failure emails instead of calling Brevo."""
    outbox: dict[str, list] = {"receipts": [], "failures": []}

    def fake_receipt(receipt: receipts.ReceiptData, pdf: bytes) -> bool:
        outbox["receipts"].append((receipt, pdf))
        return True

    def fake_failure(**kwargs) -> bool:
        outbox["failures"].append(kwargs)
        return True

    monkeypatch.setattr(receipts, "send_receipt_email", fake_receipt)
    monkeypatch.setattr(receipts, "send_failure_email", fake_failure)
    return outbox
