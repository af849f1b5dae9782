"""Order update (audit trail) persistence service."""
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from printdesk.db.models import OrderUpdate, utcnow


class UpdatePersistenceService:
    """Service for persisting audit trail entries. Entries are never modified."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_update(
        self,
        order_id: str,
        user_id: str,
        user_name: str,
        text: str,
        user_email: Optional[str] = None,
        is_system: bool = False,
        is_staff: bool = False,
        attachment_url: Optional[str] = None,
        attachment_name: Optional[str] = None,
        attachment_type: Optional[str] = None,
    ) -> OrderUpdate:
        """Append a new entry."""
        update = OrderUpdate(
            order_id=order_id,
            user_id=user_id,
            user_name=user_name,
            user_email=user_email,
            text=text,
            is_system=is_system,
            is_staff=is_staff,
            attachment_url=attachment_url,
            attachment_name=attachment_name,
            attachment_type=attachment_type,
            created_at=utcnow(),
        )
        self.db.add(update)
        await self.db.commit()
        await self.db.refresh(update)
        return update

    async def list_updates(self, order_id: str) -> List[OrderUpdate]:
        """List an order's entries oldest first, like a chat conversation."""
        result = await self.db.execute(
            select(OrderUpdate)
            .where(OrderUpdate.order_id == order_id)
            .order_by(OrderUpdate.created_at, OrderUpdate.id)
        )
        return list(result.scalars().all())

    async def get_update(self, update_id: int) -> Optional[OrderUpdate]:
        """Get entry by ID."""
        result = await self.db.execute(
            select(OrderUpdate).where(OrderUpdate.id == update_id)
        )
        return result.scalar_one_or_none()

    async def delete_update(self, update: OrderUpdate) -> None:
        """Remove an entry."""
        await self.db.delete(update)
        await self.db.commit()
