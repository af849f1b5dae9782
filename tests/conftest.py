"""Shared test fixtures and configuration."""
import asyncio
import pytest
import os
import tempfile
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Set
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("ATTACHMENTS_DIR", tempfile.mkdtemp(prefix="printdesk-attachments-"))

from printdesk.main import app
from printdesk.db.database import get_db
from printdesk.db.models import Base
from printdesk.core.config import settings
from printdesk.core.dependencies import (
    get_catalog_repository,
    get_change_feed,
    get_hub,
    get_storage,
)
from printdesk.core.errors import DependencyError
from printdesk.services.catalog.in_memory_catalog import InMemoryCatalogProvider
from printdesk.services.catalog.repository import CatalogRepository
from printdesk.services.lifecycle.service import OrderLifecycleService
from printdesk.services.ordering.models import (
    Actor,
    ActorRole,
    OrderRecord,
    OrderStatus,
    SubOrderRecord,
    SubOrderStatus,
)
from printdesk.services.storage.local import LocalAttachmentStorage
from printdesk.services.sync.feed import ChangeFeed, OrderChange
from printdesk.services.sync.hub import SubscriptionHub
from printdesk.services.sync.store import OrderStore, Scope, SqlOrderStore


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

BASE_TIME = datetime(2025, 5, 1, 9, 0, 0)


@pytest.fixture
async def test_db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def test_session_factory(test_db_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    """Create test database session."""
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def test_catalog_repository():
    """Catalog repository over the bundled product catalog."""
    return CatalogRepository(InMemoryCatalogProvider())


@pytest.fixture
def change_feed():
    """A fresh change feed per test."""
    return ChangeFeed()


@pytest.fixture
def served_storage():
    """Attachment storage rooted at the directory the app serves."""
    return LocalAttachmentStorage(
        root=settings.attachments_dir,
        base_url=settings.attachments_base_url,
        max_bytes=1024,
    )


@pytest.fixture
def attachment_storage(tmp_path):
    """Attachment storage writing under a temporary directory."""
    return LocalAttachmentStorage(
        root=str(tmp_path / "attachments"),
        base_url="/attachments",
        max_bytes=1024,
    )


@pytest.fixture
def lifecycle_service(test_db, test_catalog_repository, change_feed, attachment_storage):
    """Lifecycle service bound to the test session."""
    return OrderLifecycleService(
        test_db, test_catalog_repository, change_feed, attachment_storage
    )


@pytest.fixture
def client_actor():
    return Actor(id="client-1", role=ActorRole.CLIENT, name="Dana Client", email="dana@example.com")


@pytest.fixture
def other_client_actor():
    return Actor(id="client-2", role=ActorRole.CLIENT, name="Sam Other")


@pytest.fixture
def staff_actor():
    return Actor(id="staff-1", role=ActorRole.MEMBER, name="Alex Staff", email="alex@printdesk.test")


@pytest.fixture
def order_payload():
    """Payload for a two-line order."""
    def _order_payload(**overrides):
        payload = {
            "display_name": "Summer merch",
            "client": {"name": "Dana Client", "email": "dana@example.com", "phone": "555-0100"},
            "sub_orders": [
                {
                    "product_type": "mugs",
                    "quantity": 10,
                    "description": "White mug, logo front",
                    "delivery_time": "2025-06-03T12:00:00",
                },
                {
                    "product_type": "T-Shirts",
                    "quantity": 5,
                    "length": 70,
                    "width": 50,
                    "delivery_time": "2025-06-01T12:00:00",
                },
            ],
        }
        payload.update(overrides)
        return payload
    return _order_payload


# -------------------- Record factories --------------------


@pytest.fixture
def make_order():
    """Build an OrderRecord with sensible defaults."""
    def _make_order(order_id: str, **fields) -> OrderRecord:
        data = {
            "id": order_id,
            "user_id": "client-1",
            "client_id": "client-1",
            "client_name": "Dana Client",
            "status": OrderStatus.PENDING,
            "created_at": BASE_TIME,
        }
        data.update(fields)
        return OrderRecord(**data)
    return _make_order


@pytest.fixture
def make_sub_order():
    """Build a SubOrderRecord with sensible defaults."""
    def _make_sub_order(sub_order_id: str, order_id: str, **fields) -> SubOrderRecord:
        data = {
            "id": sub_order_id,
            "order_id": order_id,
            "product_type": "mugs",
            "product_type_name": "Mugs",
            "quantity": 1,
            "status": SubOrderStatus.PENDING,
            "created_at": BASE_TIME,
        }
        data.update(fields)
        return SubOrderRecord(**data)
    return _make_sub_order


class FakeOrderStore(OrderStore):
    """In-memory order store with controllable failures and delays."""

    def __init__(self):
        self.orders: Dict[str, OrderRecord] = {}
        self.sub_orders: Dict[str, List[SubOrderRecord]] = {}
        self.failing: Set[str] = set()
        self.delays: Dict[str, float] = {}
        self.fail_list = False
        self.list_calls = 0
        self.fetches: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.feed = ChangeFeed()

    def put(self, order: OrderRecord, sub_orders=(), publish: bool = True) -> None:
        self.orders[order.id] = order
        self.sub_orders[order.id] = list(sub_orders)
        if publish:
            self.feed.publish(OrderChange(order.id, "created"))

    def remove(self, order_id: str) -> None:
        self.orders.pop(order_id, None)
        self.sub_orders.pop(order_id, None)
        self.feed.publish(OrderChange(order_id, "deleted"))

    async def list_orders(self, scope: Scope) -> List[OrderRecord]:
        self.list_calls += 1
        if self.fail_list:
            raise DependencyError("order store offline")
        visible = [
            o for o in self.orders.values()
            if scope.owner_id is None or scope.owner_id in (o.user_id, o.client_id)
        ]
        return sorted(visible, key=lambda o: o.created_at, reverse=True)

    async def list_sub_orders(self, order_id: str) -> List[SubOrderRecord]:
        self.fetches.append(order_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(order_id, 0))
            if order_id in self.failing:
                raise DependencyError(f"sub-orders of {order_id} unavailable")
            return list(self.sub_orders.get(order_id, []))
        finally:
            self.in_flight -= 1

    def changes(self):
        return self.feed.subscribe()


@pytest.fixture
def fake_store():
    return FakeOrderStore()


@pytest.fixture
def wait_until():
    """Poll ``predicate`` until it holds or the timeout expires."""
    async def _wait_until(predicate, timeout: float = 2.0) -> None:
        deadline = asyncio.get_running_loop().time() + timeout
        while not predicate():
            if asyncio.get_running_loop().time() > deadline:
                raise AssertionError("condition not met in time")
            await asyncio.sleep(0.01)
    return _wait_until


# -------------------- API client --------------------


@pytest.fixture
def override_get_db(test_db):
    """Override get_db dependency with test database."""
    async def _override_get_db():
        yield test_db
    return _override_get_db


@pytest.fixture
def test_hub(test_session_factory, change_feed):
    """Hub over the test database; one fetch at a time on the shared connection."""
    return SubscriptionHub(
        SqlOrderStore(test_session_factory, change_feed), max_concurrency=1, fetch_timeout=5.0
    )


@pytest.fixture
def test_client(override_get_db, test_catalog_repository, change_feed, served_storage, test_hub):
    """Create FastAPI test client with overrides."""
    # Override dependencies
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_catalog_repository] = lambda: test_catalog_repository
    app.dependency_overrides[get_change_feed] = lambda: change_feed
    app.dependency_overrides[get_storage] = lambda: served_storage
    app.dependency_overrides[get_hub] = lambda: test_hub

    client = TestClient(app)

    yield client

    # Clear overrides
    app.dependency_overrides.clear()


def actor_headers(actor_id: str, role: str = "client", name: Optional[str] = None) -> Dict[str, str]:
    """Request headers identifying the caller."""
    headers = {"X-Actor-Id": actor_id, "X-Actor-Role": role}
    if name:
        headers["X-Actor-Name"] = name
    return headers


@pytest.fixture
def client_headers():
    return actor_headers("client-1", "client", "Dana Client")


@pytest.fixture
def staff_headers():
    return actor_headers("staff-1", "member", "Alex Staff")


@pytest.fixture
def admin_headers():
    return actor_headers("admin-1", "admin", "Robin Admin")


@pytest.fixture
def base_time():
    return BASE_TIME


@pytest.fixture
def later():
    """Offset helper for record timestamps."""
    def _later(minutes: int) -> datetime:
        return BASE_TIME + timedelta(minutes=minutes)
    return _later
