"""Notification persistence service."""
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import desc, select

from printdesk.db.models import Notification, utcnow


class NotificationPersistenceService:
    """Service for persisting notifications."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_notification(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        order_id: Optional[str] = None,
    ) -> Notification:
        """Create an unread notification."""
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            order_id=order_id,
            read=False,
            created_at=utcnow(),
        )
        self.db.add(notification)
        await self.db.commit()
        await self.db.refresh(notification)
        return notification

    async def list_for_user(self, user_id: str, unread_only: bool = False) -> List[Notification]:
        """List a user's notifications, newest first."""
        query = (
            select(Notification)
            .where(Notification.user_id == user_id)
            .order_by(desc(Notification.created_at), desc(Notification.id))
        )
        if unread_only:
            query = query.where(Notification.read.is_(False))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def mark_read(self, notification_id: int, user_id: str) -> Optional[Notification]:
        """Mark one of the user's notifications as read."""
        result = await self.db.execute(
            select(Notification).where(
                Notification.id == notification_id, Notification.user_id == user_id
            )
        )
        notification = result.scalar_one_or_none()
        if notification:
            notification.read = True
            await self.db.commit()
            await self.db.refresh(notification)
        return notification
