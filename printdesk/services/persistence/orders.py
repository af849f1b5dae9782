"""Order persistence service."""
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, desc, or_, select

from printdesk.db.models import Notification, Order, OrderUpdate, SubOrder, utcnow


class OrderPersistenceService:
    """Service for persisting orders and their sub-orders."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_order(
        self,
        order_data: Dict[str, Any],
        sub_orders: List[Dict[str, Any]],
    ) -> Order:
        """Create an order together with its sub-orders."""
        timestamp = utcnow()
        order = Order(**order_data, created_at=timestamp, updated_at=timestamp)
        self.db.add(order)
        await self.db.flush()

        for sub_order_data in sub_orders:
            self.db.add(
                SubOrder(
                    order_id=order.id,
                    created_at=timestamp,
                    updated_at=timestamp,
                    **sub_order_data,
                )
            )

        await self.db.commit()
        await self.db.refresh(order)
        return order

    async def get_order_by_id(self, order_id: str) -> Optional[Order]:
        """Get order by ID (sub-orders are fetched separately)."""
        result = await self.db.execute(select(Order).where(Order.id == order_id))
        return result.scalar_one_or_none()

    async def list_orders(self, owner_id: Optional[str] = None) -> List[Order]:
        """List orders newest first; restricted to one owner when given."""
        query = select(Order).order_by(desc(Order.created_at), Order.id)
        if owner_id is not None:
            query = query.where(
                or_(Order.user_id == owner_id, Order.client_id == owner_id)
            )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_sub_orders(self, order_id: str) -> List[SubOrder]:
        """List the sub-orders of one order."""
        result = await self.db.execute(
            select(SubOrder)
            .where(SubOrder.order_id == order_id)
            .order_by(SubOrder.created_at, SubOrder.id)
        )
        return list(result.scalars().all())

    async def get_sub_order(self, order_id: str, sub_order_id: str) -> Optional[SubOrder]:
        """Get one sub-order of an order."""
        result = await self.db.execute(
            select(SubOrder).where(
                SubOrder.order_id == order_id, SubOrder.id == sub_order_id
            )
        )
        return result.scalar_one_or_none()

    async def update_order_status(
        self,
        order: Order,
        status: str,
        confirmed_at: Optional[datetime] = None,
    ) -> Order:
        """Set an order's status; passing confirmed_at also marks it confirmed."""
        order.status = status
        order.updated_at = utcnow()
        if confirmed_at is not None:
            order.confirmed_by_client = True
            order.confirmed_at = confirmed_at
        await self.db.commit()
        await self.db.refresh(order)
        return order

    async def update_sub_order_status(self, sub_order: SubOrder, status: str) -> SubOrder:
        """Set a sub-order's status."""
        sub_order.status = status
        sub_order.updated_at = utcnow()
        await self.db.commit()
        await self.db.refresh(sub_order)
        return sub_order

    async def delete_order(self, order_id: str) -> None:
        """Delete an order with its sub-orders, updates and notifications."""
        await self.db.execute(delete(SubOrder).where(SubOrder.order_id == order_id))
        await self.db.execute(delete(OrderUpdate).where(OrderUpdate.order_id == order_id))
        await self.db.execute(delete(Notification).where(Notification.order_id == order_id))
        await self.db.execute(delete(Order).where(Order.id == order_id))
        await self.db.commit()
