"""Unit tests for the audit trail writer and notification emitter."""
import pytest
from unittest.mock import AsyncMock

from printdesk.core.errors import NotFoundError, ValidationError
from printdesk.services.audit import tokens
from printdesk.services.audit.writer import AuditTrailWriter
from printdesk.services.notifications.emitter import NotificationEmitter
from printdesk.services.ordering.models import Attachment, OrderRecord, OrderStatus
from printdesk.services.persistence.orders import OrderPersistenceService


@pytest.fixture
async def stored_order(test_db):
    order = await OrderPersistenceService(test_db).create_order(
        {"user_id": "client-1", "client_id": "client-1", "status": "pending"}, []
    )
    return OrderRecord.model_validate(order)


class TestAuditTrailWriter:
    """Test appending and deleting trail entries."""

    @pytest.mark.asyncio
    async def test_user_update_records_author(self, test_db, stored_order, client_actor, staff_actor):
        writer = AuditTrailWriter(test_db)

        from_client = await writer.append_update(stored_order.id, client_actor, "  Looks great  ")
        from_staff = await writer.append_update(stored_order.id, staff_actor, "Printing now")

        assert from_client.text == "Looks great"
        assert from_client.user_name == "Dana Client"
        assert from_client.is_staff is False
        assert from_staff.is_staff is True
        assert from_staff.user_email == "alex@printdesk.test"

    @pytest.mark.asyncio
    async def test_system_update_uses_system_author(self, test_db, stored_order):
        writer = AuditTrailWriter(test_db)

        update = await writer.append_system_update(
            stored_order.id, tokens.order_status_changed("in_progress")
        )

        assert update.user_id == "system"
        assert update.user_name == "system"
        assert update.is_system is True
        assert tokens.parse_order_status(update.text) == "in_progress"

    @pytest.mark.asyncio
    async def test_attachment_without_text(self, test_db, stored_order, client_actor):
        writer = AuditTrailWriter(test_db)
        attachment = Attachment(url="/attachments/a.png", name="a.png", media_type="image/png")

        update = await writer.append_update(stored_order.id, client_actor, "", attachment)

        assert update.attachment_url == "/attachments/a.png"
        assert update.attachment_type == "image/png"

    @pytest.mark.asyncio
    async def test_blank_update_rejected(self, test_db, stored_order, client_actor):
        writer = AuditTrailWriter(test_db)

        with pytest.raises(ValidationError):
            await writer.append_update(stored_order.id, client_actor, "")

    @pytest.mark.asyncio
    async def test_delete_checks_order(self, test_db, stored_order, staff_actor):
        writer = AuditTrailWriter(test_db)
        update = await writer.append_update(stored_order.id, staff_actor, "note")

        with pytest.raises(NotFoundError):
            await writer.delete_update("another-order", update.id, staff_actor, OrderStatus.PENDING)

        await writer.delete_update(stored_order.id, update.id, staff_actor, OrderStatus.PENDING)
        assert await writer.list_updates(stored_order.id) == []

    @pytest.mark.asyncio
    async def test_current_status_entry_is_kept(self, test_db, stored_order, staff_actor):
        writer = AuditTrailWriter(test_db)
        update = await writer.append_system_update(
            stored_order.id, tokens.order_status_changed("pending")
        )

        with pytest.raises(ValidationError):
            await writer.delete_update(stored_order.id, update.id, staff_actor, OrderStatus.PENDING)


class TestTokens:
    """Test system message tokens."""

    def test_tokens(self):
        assert tokens.order_status_changed("completed") == "order.statusChanged:completed"
        assert tokens.sub_order_status_changed("s1", "pending") == "subOrder.statusChanged:s1:pending"
        assert tokens.parse_order_status("order.confirmedByClient") is None


class TestNotificationEmitter:
    """Test best-effort notifications."""

    @pytest.mark.asyncio
    async def test_order_created(self, test_db, stored_order):
        emitter = NotificationEmitter(test_db)

        notification = await emitter.emit_order_created(stored_order)

        assert notification.user_id == "client-1"
        assert notification.type == "order_created"
        assert notification.title == "New order created"
        assert notification.message == f"Order {stored_order.short_id} was placed successfully"
        assert notification.read is False

    @pytest.mark.asyncio
    async def test_order_confirmed(self, test_db, stored_order):
        emitter = NotificationEmitter(test_db)

        notification = await emitter.emit("order_confirmed", stored_order)

        assert notification.title == "Order confirmed"
        assert stored_order.short_id in notification.message

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, test_db, stored_order, caplog):
        emitter = NotificationEmitter(test_db)
        emitter.notifications.create_notification = AsyncMock(side_effect=RuntimeError("mail down"))

        result = await emitter.emit_order_created(stored_order)

        assert result is None
        assert "[NOTIFY]" in caplog.text

    @pytest.mark.asyncio
    async def test_unknown_kind(self, test_db, stored_order):
        with pytest.raises(ValueError):
            await NotificationEmitter(test_db).emit("order_shipped", stored_order)

    def test_short_id(self):
        order = OrderRecord(id="abcdef0123456789", user_id="u")
        assert order.short_id == "#ABCDEF01"
