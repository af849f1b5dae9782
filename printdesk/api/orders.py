"""Order API endpoints."""
import logging
from datetime import datetime
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from printdesk.core.dependencies import get_actor, get_hub, get_lifecycle_service
from printdesk.core.errors import ValidationError
from printdesk.services.lifecycle.service import OrderLifecycleService
from printdesk.services.ordering import query
from printdesk.services.ordering.models import Actor, OrderCreate, OrderView
from printdesk.services.sync.hub import SubscriptionHub


router = APIRouter()
logger = logging.getLogger(__name__)


class SubOrderResponse(BaseModel):
    """Sub-order response model."""
    id: str
    product_type: str
    product_type_name: str | None = None
    product_type_custom: bool = False
    quantity: int
    length: float | None = None
    width: float | None = None
    cmp: float | None = None
    description: str | None = None
    design_file: str | None = None
    design_file_path: str | None = None
    delivery_time: datetime | None = None
    notes: str | None = None
    status: str
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """Order response model."""
    id: str
    display_name: str | None = None
    user_id: str
    user_name: str | None = None
    user_email: str | None = None
    client_id: str | None = None
    client_name: str | None = None
    client_email: str | None = None
    client_phone: str | None = None
    client_company: str | None = None
    status: str
    confirmed_by_client: bool = False
    confirmed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class OrderViewResponse(BaseModel):
    """Aggregated order view response model."""
    order: OrderResponse
    sub_orders: List[SubOrderResponse] = []
    item_count: int = 0
    total_quantity: int = 0
    earliest_delivery: datetime | None = None
    can_complete: bool = True
    incomplete_sub_order_ids: List[str] = []
    degraded: bool = False

    class Config:
        from_attributes = True


class OrderListResponse(BaseModel):
    """Filtered order list with dashboard counts."""
    orders: List[OrderViewResponse]
    stats: Dict[str, int]


class StatusChangeRequest(BaseModel):
    """Requested status for an order or sub-order."""
    status: str


def check_list_params(tab: Optional[str], sort: str) -> None:
    """Reject unknown tab or sort values before any work is done."""
    if tab and tab != query.ALL and tab not in {t.value for t in query.Tab}:
        raise ValidationError(f"Unknown tab: {tab}")
    if sort not in {k.value for k in query.SortKey}:
        raise ValidationError(f"Unknown sort key: {sort}")


def to_response(view: OrderView) -> OrderViewResponse:
    """Convert an aggregated view to its API shape."""
    return OrderViewResponse.model_validate(view.model_dump(mode="json"))


@router.get("/api/orders", response_model=OrderListResponse)
async def list_orders(
    request: Request,
    tab: Optional[str] = query.Tab.CURRENT.value,
    status: Optional[str] = None,
    product: Optional[str] = None,
    sort: str = query.SortKey.DELIVERY_ASC.value,
    q: Optional[str] = None,
    actor: Actor = Depends(get_actor),
    hub: SubscriptionHub = Depends(get_hub),
):
    """List the actor's visible orders, filtered, searched and sorted."""
    logger.info(
        f"[ORDERS API] List requested by {actor.id} - tab: {tab}, status: {status}, "
        f"product: {product}, sort: {sort}, q: {q!r}, "
        f"Client: {request.client.host if request.client else 'unknown'}"
    )
    check_list_params(tab, sort)

    views = await hub.snapshot(actor)
    filtered = query.apply(
        views,
        tab=tab,
        status_filter=status,
        product_filter=product,
        sort_key=sort,
        search_text=q,
    )
    logger.info(f"[ORDERS API] Returning {len(filtered)} of {len(views)} orders")
    return OrderListResponse(
        orders=[to_response(v) for v in filtered],
        stats=query.order_stats(views),
    )


@router.post("/api/orders", response_model=OrderViewResponse, status_code=201)
async def create_order(
    payload: OrderCreate,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_lifecycle_service),
):
    """Place a new order."""
    logger.info(
        f"[ORDERS API] Create requested by {actor.id} ({actor.role}) - "
        f"{len(payload.sub_orders)} sub-order(s)"
    )
    return to_response(await service.create_order(actor, payload))


@router.get("/api/orders/{order_id}", response_model=OrderViewResponse)
async def get_order(
    order_id: str,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_lifecycle_service),
):
    """Get one aggregated order."""
    return to_response(await service.get_order(actor, order_id))


@router.delete("/api/orders/{order_id}", status_code=204)
async def delete_order(
    order_id: str,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_lifecycle_service),
):
    """Delete an order and everything attached to it."""
    logger.info(f"[ORDERS API] Delete of order {order_id} requested by {actor.id}")
    await service.delete_order(actor, order_id)


@router.post("/api/orders/{order_id}/status", response_model=OrderViewResponse)
async def change_order_status(
    order_id: str,
    body: StatusChangeRequest,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_lifecycle_service),
):
    """Move an order to a new status."""
    logger.info(
        f"[ORDERS API] Status change of order {order_id} to {body.status} "
        f"requested by {actor.id} ({actor.role})"
    )
    return to_response(await service.transition_order_status(actor, order_id, body.status))


@router.post("/api/orders/{order_id}/confirm", response_model=OrderViewResponse)
async def confirm_order(
    order_id: str,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_lifecycle_service),
):
    """Confirm an order on the client's side."""
    logger.info(f"[ORDERS API] Confirmation of order {order_id} requested by {actor.id}")
    return to_response(await service.confirm_order(actor, order_id))


@router.post(
    "/api/orders/{order_id}/sub-orders/{sub_order_id}/status",
    response_model=OrderViewResponse,
)
async def change_sub_order_status(
    order_id: str,
    sub_order_id: str,
    body: StatusChangeRequest,
    actor: Actor = Depends(get_actor),
    service: OrderLifecycleService = Depends(get_lifecycle_service),
):
    """Move one sub-order to a new status."""
    logger.info(
        f"[ORDERS API] Status change of sub-order {sub_order_id} (order {order_id}) "
        f"to {body.status} requested by {actor.id} ({actor.role})"
    )
    return to_response(
        await service.transition_sub_order_status(actor, order_id, sub_order_id, body.status)
    )
