"""Unit tests for persistence services (orders, updates, notifications)."""
import pytest
from datetime import datetime
from sqlalchemy import select

from printdesk.db.models import Notification, utcnow
from printdesk.services.persistence.notifications import NotificationPersistenceService
from printdesk.services.persistence.orders import OrderPersistenceService
from printdesk.services.persistence.updates import UpdatePersistenceService


def order_data(user_id="client-1", **fields):
    data = {
        "user_id": user_id,
        "user_name": "Dana Client",
        "client_id": user_id,
        "client_name": "Dana Client",
        "status": "pending_confirmation",
    }
    data.update(fields)
    return data


def sub_order_data(product_type="mugs", quantity=1, **fields):
    data = {"product_type": product_type, "quantity": quantity}
    data.update(fields)
    return data


class TestOrderPersistence:
    """Test order persistence service."""

    @pytest.mark.asyncio
    async def test_create_order(self, test_db):
        """Test creating an order with sub-orders."""
        service = OrderPersistenceService(test_db)

        order = await service.create_order(
            order_data(),
            [sub_order_data("mugs", 10), sub_order_data("caps", 2)],
        )

        assert order.id is not None
        assert len(order.id) == 32
        assert order.status == "pending_confirmation"
        assert order.confirmed_by_client is False
        assert order.created_at is not None

        sub_orders = await service.list_sub_orders(order.id)
        assert sorted(so.product_type for so in sub_orders) == ["caps", "mugs"]
        assert all(so.status == "pending" for so in sub_orders)
        assert all(so.order_id == order.id for so in sub_orders)

    @pytest.mark.asyncio
    async def test_get_order_by_id(self, test_db):
        """Test retrieving an order."""
        service = OrderPersistenceService(test_db)
        order = await service.create_order(order_data(), [])

        retrieved = await service.get_order_by_id(order.id)

        assert retrieved is not None
        assert retrieved.id == order.id
        assert await service.get_order_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_list_orders_by_owner(self, test_db):
        """Test owners see orders they placed or that were placed for them."""
        service = OrderPersistenceService(test_db)
        own = await service.create_order(order_data("client-1"), [])
        for_them = await service.create_order(
            order_data("staff-1", client_id="client-1"), []
        )
        await service.create_order(order_data("client-2"), [])

        mine = await service.list_orders("client-1")
        everything = await service.list_orders()

        assert {o.id for o in mine} == {own.id, for_them.id}
        assert len(everything) == 3

    @pytest.mark.asyncio
    async def test_update_order_status(self, test_db):
        """Test status changes and confirmation stamps."""
        service = OrderPersistenceService(test_db)
        order = await service.create_order(order_data(), [])

        confirmed_at = utcnow()
        updated = await service.update_order_status(order, "pending", confirmed_at=confirmed_at)

        assert updated.status == "pending"
        assert updated.confirmed_by_client is True
        assert updated.confirmed_at == confirmed_at

        updated = await service.update_order_status(updated, "in_progress")
        assert updated.status == "in_progress"
        assert updated.confirmed_at == confirmed_at

    @pytest.mark.asyncio
    async def test_update_sub_order_status(self, test_db):
        """Test sub-order status changes."""
        service = OrderPersistenceService(test_db)
        order = await service.create_order(order_data(), [sub_order_data()])
        sub_order = (await service.list_sub_orders(order.id))[0]

        await service.update_sub_order_status(sub_order, "completed")

        fetched = await service.get_sub_order(order.id, sub_order.id)
        assert fetched.status == "completed"
        assert await service.get_sub_order("other-order", sub_order.id) is None

    @pytest.mark.asyncio
    async def test_sub_order_fields_round_trip(self, test_db):
        """Test optional sub-order fields are stored as given."""
        service = OrderPersistenceService(test_db)
        delivery = datetime(2025, 6, 1, 12, 0)
        order = await service.create_order(
            order_data(),
            [sub_order_data(
                "t-shirts", 5,
                product_type_name="T-Shirts",
                length=70.0, width=50.0, cmp=2.5,
                description="Front print",
                design_file="https://files.test/logo.png",
                delivery_time=delivery,
                notes="Rush",
            )],
        )

        sub_order = (await service.list_sub_orders(order.id))[0]

        assert sub_order.product_type_name == "T-Shirts"
        assert sub_order.length == 70.0
        assert sub_order.cmp == 2.5
        assert sub_order.delivery_time == delivery
        assert sub_order.notes == "Rush"

    @pytest.mark.asyncio
    async def test_delete_order_cascades(self, test_db):
        """Test deleting an order removes its children."""
        service = OrderPersistenceService(test_db)
        updates = UpdatePersistenceService(test_db)
        notifications = NotificationPersistenceService(test_db)
        order = await service.create_order(order_data(), [sub_order_data()])
        await updates.add_update(order.id, "system", "system", "order.createdByClient", is_system=True)
        await notifications.create_notification("client-1", "order_created", "t", "m", order.id)

        await service.delete_order(order.id)

        assert await service.get_order_by_id(order.id) is None
        assert await service.list_sub_orders(order.id) == []
        assert await updates.list_updates(order.id) == []
        remaining = await test_db.execute(select(Notification).where(Notification.order_id == order.id))
        assert remaining.scalars().all() == []


class TestUpdatePersistence:
    """Test update trail persistence service."""

    @pytest.mark.asyncio
    async def test_updates_listed_oldest_first(self, test_db):
        """Test entries come back in insertion order."""
        order = await OrderPersistenceService(test_db).create_order(order_data(), [])
        service = UpdatePersistenceService(test_db)

        for text in ("first", "second", "third"):
            await service.add_update(order.id, "client-1", "Dana", text)

        assert [u.text for u in await service.list_updates(order.id)] == [
            "first", "second", "third",
        ]

    @pytest.mark.asyncio
    async def test_delete_update(self, test_db):
        """Test removing one entry."""
        order = await OrderPersistenceService(test_db).create_order(order_data(), [])
        service = UpdatePersistenceService(test_db)
        update = await service.add_update(order.id, "client-1", "Dana", "oops")

        await service.delete_update(update)

        assert await service.get_update(update.id) is None


class TestNotificationPersistence:
    """Test notification persistence service."""

    @pytest.mark.asyncio
    async def test_list_and_mark_read(self, test_db):
        """Test unread filtering and marking as read."""
        service = NotificationPersistenceService(test_db)
        first = await service.create_notification("client-1", "order_created", "New", "one")
        await service.create_notification("client-1", "order_confirmed", "Confirmed", "two")
        await service.create_notification("client-2", "order_created", "New", "other")

        assert len(await service.list_for_user("client-1")) == 2

        assert await service.mark_read(first.id, "client-2") is None
        marked = await service.mark_read(first.id, "client-1")

        assert marked.read is True
        unread = await service.list_for_user("client-1", unread_only=True)
        assert [n.message for n in unread] == ["two"]
