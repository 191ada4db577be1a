from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.core.config import settings
from app.core.context import Actor, LedgerContext
from app.db.collections import PARTNERS
from app.db.session import get_store
from app.db.store import MemoryDocumentStore
from app.main import app
from app.models.hotel import MemberRole
from app.services.ledger_service import LedgerService
from app.services.partner_service import PartnerService

HOTEL_ID = "hotel-1"


@pytest.fixture(autouse=True)
def ledger_settings(monkeypatch):
    """Pin ledger policy so a developer's .env cannot change test outcomes."""
    monkeypatch.setattr(settings, "OVERDRAFT_POLICY", "confirm")
    monkeypatch.setattr(settings, "MAX_OVERAGE", Decimal("300"))
    monkeypatch.setattr(settings, "PERIOD_LENGTH_DAYS", 30)
    monkeypatch.setattr(settings, "TRANSACTION_MAX_RETRIES", 5)


@pytest.fixture
def store():
    """Fresh in-memory document store."""
    return MemoryDocumentStore()


@pytest.fixture
def admin_ctx(store):
    return LedgerContext(
        store=store,
        hotel_id=HOTEL_ID,
        actor=Actor(user_id="admin-1", email="admin@example.com", name="Admin"),
        role=MemberRole.ADMIN
    )


@pytest.fixture
def member_ctx(store):
    return LedgerContext(
        store=store,
        hotel_id=HOTEL_ID,
        actor=Actor(user_id="member-1", email="member@example.com", name="Member"),
        role=MemberRole.MEMBER
    )


@pytest.fixture
def make_partner(admin_ctx):
    """Create a partner, with an active period unless told otherwise."""
    async def _make(name="Innovate Inc.", employees=2, total="2000", start_period=True):
        partner = await PartnerService.add_partner(admin_ctx, name, employees, Decimal(total))
        if start_period:
            await LedgerService.start_new_period(admin_ctx, partner.id)
            partner = await PartnerService.get_partner(admin_ctx, partner.id)
        return partner
    return _make


@pytest.fixture
def expire_period(store):
    """Move a partner's current period start into the past."""
    async def _expire(partner_id: str, days: int = 31) -> None:
        await store.update(PARTNERS, partner_id, {
            "last_period_started_at": datetime.now(timezone.utc) - timedelta(days=days)
        })
    return _expire


@pytest_asyncio.fixture
async def api_client(store):
    """HTTP client against the app, backed by the test store."""
    app.dependency_overrides[get_store] = lambda: store
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
