"""Order update trail API endpoints."""
import logging
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel

from printdesk.core.dependencies import get_actor, get_lifecycle_service
from printdesk.services.lifecycle.service import OrderLifecycleService
from printdesk.services.ordering.models import Actor


router = APIRouter()
logger = logging.getLogger(__name__)


class UpdateResponse(BaseModel):
    """Update trail entry response model."""
    id: int
    order_id: str
    user_id: str
    user_name: str
    user_email: str | None = None
    text: str = ""
    is_system: bool = False
    is_staff: bool = False
    attachment_url: str | None = None
    attachment_name: str | None = None
    attachment_type: str | None = None
    created_at: datetime | None = None

    class Config:
        from_attributes = True


@router.get("/api/orders/{order_id}/updates", response_model=List[UpdateResponse])
async def list_updates(
    order_id: str,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_lifecycle_service),
):
    """Get an order's update trail, oldest first."""
    updates = await service.list_updates(actor, order_id)
    logger.debug(f"[UPDATES API] {len(updates)} update(s) for order {order_id}")
    return [UpdateResponse.model_validate(u) for u in updates]


@router.post("/api/orders/{order_id}/updates", response_model=UpdateResponse, status_code=201)
async def post_update(
    order_id: str,
    text: str = Form(""),
    file: Optional[UploadFile] = File(None),
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_lifecycle_service),
):
    """Post a comment, optionally with an attached file."""
    logger.info(
        f"[UPDATES API] Update on order {order_id} by {actor.id} - "
        f"text length: {len(text)}, file: {file.filename if file else None}"
    )
    file_data = await file.read() if file else None
    update = await service.append_update(
        actor,
        order_id,
        text,
        file_data=file_data,
        filename=file.filename if file else None,
        media_type=file.content_type if file else None,
    )
    return UpdateResponse.model_validate(update)


@router.delete("/api/orders/{order_id}/updates/{update_id}", status_code=204)
async def delete_update(
    order_id: str,
    update_id: int,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_lifecycle_service),
):
    """Delete one entry from an order's trail."""
    logger.info(f"[UPDATES API] Delete of update {update_id} on order {order_id} by {actor.id}")
    await service.delete_update(actor, order_id, update_id)
