"""Order lifecycle commands."""
import logging
from contextlib import asynccontextmanager
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from printdesk.core.errors import (
    DependencyError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from printdesk.db.models import Order, utcnow
from printdesk.services.audit import tokens
from printdesk.services.audit.writer import AuditTrailWriter
from printdesk.services.catalog.repository import CatalogRepository
from printdesk.services.notifications.emitter import NotificationEmitter
from printdesk.services.ordering.aggregator import aggregate
from printdesk.services.ordering.models import (
    Actor,
    Attachment,
    NotificationRecord,
    OrderCreate,
    OrderRecord,
    OrderStatus,
    OrderView,
    SubOrderRecord,
    SubOrderStatus,
    UpdateRecord,
)
from printdesk.services.ordering.transitions import (
    can_view_order,
    raise_for_denial,
    validate_confirmation,
    validate_order_transition,
    validate_sub_order_transition,
)
from printdesk.services.ordering.validator import OrderValidator
from printdesk.services.persistence.orders import OrderPersistenceService
from printdesk.services.storage.base import AttachmentStorage
from printdesk.services.sync.feed import ChangeFeed, OrderChange

logger = logging.getLogger(__name__)


class OrderLifecycleService:
    """
    Runs every order mutation.

    Each command validates first, then writes in a fixed order: the record
    itself, then its audit entry, then any notification. Writes are
    independent: a failure partway through is raised to the caller and
    earlier writes stay. Every record write is announced on the change feed
    so live subscriptions republish from the store.
    """

    def __init__(
        self,
        db: AsyncSession,
        catalog_repository: CatalogRepository,
        feed: ChangeFeed,
        storage: Optional[AttachmentStorage] = None,
    ):
        self.db = db
        self.feed = feed
        self.storage = storage
        self.orders = OrderPersistenceService(db)
        self.order_validator = OrderValidator(catalog_repository)
        self.audit = AuditTrailWriter(db)
        self.notifier = NotificationEmitter(db)

    @asynccontextmanager
    async def _store_errors(self, action: str):
        """Turn database failures into DependencyError."""
        try:
            yield
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                f"[LIFECYCLE] Store failure while trying to {action} - "
                f"Error: {type(e).__name__}: {str(e)}",
                exc_info=True,
            )
            raise DependencyError(f"Could not {action}: the order store is unavailable") from e

    # -------------------- Reads --------------------

    async def _load_order(self, actor: Actor, order_id: str) -> Order:
        async with self._store_errors("load the order"):
            order = await self.orders.get_order_by_id(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        if not can_view_order(OrderRecord.model_validate(order), actor):
            raise PermissionDeniedError("You do not have access to this order")
        return order

    async def _sub_orders(self, order_id: str) -> List[SubOrderRecord]:
        async with self._store_errors("load sub-orders"):
            sub_orders = await self.orders.list_sub_orders(order_id)
        return [SubOrderRecord.model_validate(so) for so in sub_orders]

    async def _view(self, order: Order) -> OrderView:
        record = OrderRecord.model_validate(order)
        return aggregate(record, await self._sub_orders(record.id))

    async def get_order(self, actor: Actor, order_id: str) -> OrderView:
        """Aggregated view of one order."""
        return await self._view(await self._load_order(actor, order_id))

    async def list_updates(self, actor: Actor, order_id: str) -> List[UpdateRecord]:
        """The order's audit trail, oldest first."""
        await self._load_order(actor, order_id)
        async with self._store_errors("load updates"):
            return await self.audit.list_updates(order_id)

    # -------------------- Commands --------------------

    async def create_order(self, actor: Actor, payload: OrderCreate) -> OrderView:
        """
        Place a new order with its sub-orders.

        Client orders wait for the client's confirmation; orders placed by
        staff on a client's behalf start as pending.
        """
        self.order_validator.validate(payload)

        contact = payload.client
        if actor.is_staff:
            if not (contact.name or contact.email):
                raise ValidationError("Client name or email is required")
            status = OrderStatus.PENDING
            token = tokens.ORDER_CREATED_BY_TEAM
            client = {
                "client_id": contact.id,
                "client_name": contact.name or contact.email,
                "client_email": contact.email or "",
                "client_phone": contact.phone or "",
                "client_company": contact.company or "",
            }
        else:
            status = OrderStatus.PENDING_CONFIRMATION
            token = tokens.ORDER_CREATED_BY_CLIENT
            client = {
                "client_id": actor.id,
                "client_name": contact.name or actor.display_name,
                "client_email": contact.email or actor.email or "",
                "client_phone": contact.phone or "",
                "client_company": contact.company or "",
            }

        order_data = {
            "user_id": actor.id,
            "user_name": actor.display_name,
            "user_email": actor.email,
            "display_name": payload.display_name,
            "status": status.value,
            "confirmed_by_client": False,
            **client,
        }
        sub_orders = []
        for item in payload.sub_orders:
            sub_orders.append(
                {
                    **(await self.order_validator.describe_product(item.product_type)),
                    "quantity": item.quantity,
                    "length": item.length,
                    "width": item.width,
                    "cmp": item.cmp,
                    "description": item.description,
                    "design_file": item.design_file or "",
                    "design_file_path": item.design_file_path or "",
                    "delivery_time": item.delivery_time,
                    "notes": item.notes,
                    "status": SubOrderStatus.PENDING.value,
                }
            )

        async with self._store_errors("create the order"):
            order = await self.orders.create_order(order_data, sub_orders)
        record = OrderRecord.model_validate(order)
        self.feed.publish(OrderChange(record.id, "created"))
        logger.info(
            f"[LIFECYCLE] Order {record.id} created by {actor.id} "
            f"({len(sub_orders)} sub-order(s), status {status.value})"
        )

        async with self._store_errors("record the order creation"):
            await self.audit.append_system_update(record.id, token)
        await self.notifier.emit_order_created(record)
        return await self._view(order)

    async def transition_order_status(
        self, actor: Actor, order_id: str, status: str
    ) -> OrderView:
        """Move an order to ``status`` through the generic status setter."""
        order = await self._load_order(actor, order_id)
        sub_orders = await self._sub_orders(order.id)
        decision = raise_for_denial(
            validate_order_transition(
                OrderStatus(order.status),
                status,
                actor.role,
                {so.id: so.status for so in sub_orders},
            )
        )

        previous = order.status
        async with self._store_errors("update the order status"):
            order = await self.orders.update_order_status(order, decision.target)
        self.feed.publish(OrderChange(order.id, "status_changed"))
        logger.info(
            f"[LIFECYCLE] Order {order.id} status changed: {previous} -> {decision.target} "
            f"by {actor.id}"
        )

        async with self._store_errors("record the status change"):
            await self.audit.append_system_update(order.id, decision.audit_text)
        return aggregate(OrderRecord.model_validate(order), sub_orders)

    async def transition_sub_order_status(
        self, actor: Actor, order_id: str, sub_order_id: str, status: str
    ) -> OrderView:
        """Move one sub-order to ``status``."""
        order = await self._load_order(actor, order_id)
        async with self._store_errors("load the sub-order"):
            sub_order = await self.orders.get_sub_order(order.id, sub_order_id)
        if sub_order is None:
            raise NotFoundError(f"Sub-order {sub_order_id} not found in order {order_id}")

        decision = raise_for_denial(
            validate_sub_order_transition(
                sub_order.id,
                SubOrderStatus(sub_order.status),
                status,
                actor.role,
                order_id=order.id,
                order_status=OrderStatus(order.status),
            )
        )

        previous = sub_order.status
        async with self._store_errors("update the sub-order status"):
            await self.orders.update_sub_order_status(sub_order, decision.target)
        self.feed.publish(OrderChange(order.id, "sub_order_changed"))
        logger.info(
            f"[LIFECYCLE] Sub-order {sub_order_id} of order {order.id} status changed: "
            f"{previous} -> {decision.target} by {actor.id}"
        )

        async with self._store_errors("record the sub-order status change"):
            await self.audit.append_system_update(order.id, decision.audit_text)
        return await self._view(order)

    async def confirm_order(self, actor: Actor, order_id: str) -> OrderView:
        """Confirm an order on the client's side. Allowed exactly once."""
        order = await self._load_order(actor, order_id)
        decision = raise_for_denial(
            validate_confirmation(OrderRecord.model_validate(order), actor)
        )

        async with self._store_errors("confirm the order"):
            order = await self.orders.update_order_status(
                order, decision.target, confirmed_at=utcnow()
            )
        record = OrderRecord.model_validate(order)
        self.feed.publish(OrderChange(record.id, "confirmed"))
        logger.info(f"[LIFECYCLE] Order {record.id} confirmed by {actor.id}")

        async with self._store_errors("record the confirmation"):
            await self.audit.append_system_update(record.id, decision.audit_text)
        await self.notifier.emit(decision.notification, record)
        return await self._view(order)

    async def upload_attachment(
        self, actor: Actor, data: bytes, filename: str, media_type: Optional[str]
    ) -> Attachment:
        """Store a file for use in an update."""
        if self.storage is None:
            raise DependencyError("Attachment storage is not configured")
        result = await self.storage.upload(data, filename, media_type, "updates", actor.id)
        return result.as_attachment()

    async def append_update(
        self,
        actor: Actor,
        order_id: str,
        text: str = "",
        file_data: Optional[bytes] = None,
        filename: Optional[str] = None,
        media_type: Optional[str] = None,
    ) -> UpdateRecord:
        """
        Post a comment to an order's trail.

        Args:
            actor: Author of the comment
            order_id: Order to comment on
            text: Comment text; may be empty when a file is attached
            file_data: Raw bytes of an optional attachment
            filename: Original name of the attachment
            media_type: MIME type of the attachment

        Returns:
            The stored entry
        """
        order = await self._load_order(actor, order_id)
        attachment = None
        if file_data is not None:
            attachment = await self.upload_attachment(
                actor, file_data, filename or "file", media_type
            )
        async with self._store_errors("post the update"):
            return await self.audit.append_update(order.id, actor, text, attachment)

    async def delete_update(self, actor: Actor, order_id: str, update_id: int) -> None:
        """Delete one entry from an order's trail."""
        order = await self._load_order(actor, order_id)
        async with self._store_errors("delete the update"):
            await self.audit.delete_update(
                order.id, update_id, actor, OrderStatus(order.status)
            )

    async def delete_order(self, actor: Actor, order_id: str) -> None:
        """Delete an order with its sub-orders, trail and notifications."""
        order = await self._load_order(actor, order_id)
        if not actor.is_staff:
            raise PermissionDeniedError("Only team members can delete orders")

        async with self._store_errors("delete the order"):
            await self.orders.delete_order(order.id)
        self.feed.publish(OrderChange(order_id, "deleted"))
        logger.info(f"[LIFECYCLE] Order {order_id} deleted by {actor.id}")

    # -------------------- Notifications --------------------

    async def list_notifications(
        self, actor: Actor, unread_only: bool = False
    ) -> List[NotificationRecord]:
        """The actor's notifications, newest first."""
        async with self._store_errors("load notifications"):
            notifications = await self.notifier.notifications.list_for_user(
                actor.id, unread_only=unread_only
            )
        return [NotificationRecord.model_validate(n) for n in notifications]

    async def mark_notification_read(
        self, actor: Actor, notification_id: int
    ) -> NotificationRecord:
        """Mark one of the actor's notifications as read."""
        async with self._store_errors("update the notification"):
            notification = await self.notifier.notifications.mark_read(
                notification_id, actor.id
            )
        if notification is None:
            raise NotFoundError(f"Notification {notification_id} not found")
        return NotificationRecord.model_validate(notification)
