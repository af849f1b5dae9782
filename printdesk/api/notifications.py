"""Notification API endpoints."""
from datetime import datetime
from typing import List
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from printdesk.core.dependencies import get_actor, get_lifecycle_service
from printdesk.services.lifecycle.service import OrderLifecycleService
from printdesk.services.ordering.models import Actor


router = APIRouter()


class NotificationResponse(BaseModel):
    """Notification response model."""
    id: int
    type: str
    title: str
    message: str
    order_id: str | None = None
    read: bool = False
    created_at: datetime | None = None

    class Config:
        from_attributes = True


@router.get("/api/notifications", response_model=List[NotificationResponse])
async def list_notifications(
    unread: bool = False,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_lifecycle_service),
):
    """Get the caller's notifications, newest first."""
    notifications = await service.list_notifications(actor, unread_only=unread)
    return [NotificationResponse.model_validate(n) for n in notifications]


@router.post("/api/notifications/{notification_id}/read", response_model=NotificationResponse)
async def mark_notification_read(
    notification_id: int,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_lifecycle_service),
):
    """Mark a notification as read."""
    notification = await service.mark_notification_read(actor, notification_id)
    return NotificationResponse.model_validate(notification)
