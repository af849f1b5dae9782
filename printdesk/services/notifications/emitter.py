"""Notification emitter."""
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from printdesk.services.ordering.models import NotificationRecord, OrderRecord
from printdesk.services.persistence.notifications import NotificationPersistenceService

logger = logging.getLogger(__name__)

ORDER_CREATED = "order_created"
ORDER_CONFIRMED = "order_confirmed"


class NotificationEmitter:
    """Produces notifications for lifecycle events.

    Delivery is best-effort: a failed emission is logged and reported as
    None, and never undoes the write that triggered it.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.notifications = NotificationPersistenceService(db)

    async def emit_order_created(self, order: OrderRecord) -> Optional[NotificationRecord]:
        """Tell the order's creator their order was placed."""
        return await self._emit(
            order,
            ORDER_CREATED,
            "New order created",
            f"Order {order.short_id} was placed successfully",
        )

    async def emit_order_confirmed(self, order: OrderRecord) -> Optional[NotificationRecord]:
        """Tell the order's creator their order is confirmed."""
        return await self._emit(
            order,
            ORDER_CONFIRMED,
            "Order confirmed",
            f"Order {order.short_id} has been confirmed and is ready for processing",
        )

    async def emit(self, kind: str, order: OrderRecord) -> Optional[NotificationRecord]:
        """Dispatch by notification type."""
        if kind == ORDER_CREATED:
            return await self.emit_order_created(order)
        if kind == ORDER_CONFIRMED:
            return await self.emit_order_confirmed(order)
        raise ValueError(f"Unknown notification type '{kind}'")

    async def _emit(
        self, order: OrderRecord, kind: str, title: str, message: str
    ) -> Optional[NotificationRecord]:
        try:
            notification = await self.notifications.create_notification(
                user_id=order.user_id,
                type=kind,
                title=title,
                message=message,
                order_id=order.id,
            )
        except Exception as e:
            logger.error(
                f"[NOTIFY] Failed to emit {kind} for order {order.id} - "
                f"Error: {type(e).__name__}: {str(e)}",
                exc_info=True,
            )
            await self.db.rollback()
            return None
        logger.info(f"[NOTIFY] {kind} sent to user {order.user_id} for order {order.id}")
        return NotificationRecord.model_validate(notification)
