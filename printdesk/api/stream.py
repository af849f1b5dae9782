"""Live order list over WebSocket."""
import asyncio
import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from printdesk.api.orders import check_list_params, to_response
from printdesk.core.dependencies import get_hub, resolve_actor
from printdesk.core.errors import OrderLifecycleError
from printdesk.services.ordering import query
from printdesk.services.ordering.models import OrderView
from printdesk.services.sync.hub import SubscriptionHub


router = APIRouter()
logger = logging.getLogger(__name__)


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    """Consume client frames until the socket closes."""
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


@router.websocket("/ws/orders")
async def stream_orders(
    websocket: WebSocket,
    tab: Optional[str] = query.Tab.CURRENT.value,
    status: Optional[str] = None,
    product: Optional[str] = None,
    sort: str = query.SortKey.DELIVERY_ASC.value,
    q: Optional[str] = None,
    hub: SubscriptionHub = Depends(get_hub),
):
    """
    Push the actor's order list every time it is republished.

    Each message carries the complete filtered list, never a diff.
    """
    await websocket.accept()
    headers = websocket.headers
    try:
        actor = resolve_actor(
            headers.get("x-actor-id"),
            headers.get("x-actor-role"),
            headers.get("x-actor-name"),
            headers.get("x-actor-email"),
        )
        check_list_params(tab, sort)
    except OrderLifecycleError as e:
        await websocket.send_json(e.to_dict())
        await websocket.close(code=1008)
        return

    subscription = hub.acquire(actor)
    latest: asyncio.Queue = asyncio.Queue()
    remove_listener = subscription.add_listener(latest.put_nowait)
    logger.info(f"[STREAM] {actor.id} subscribed to scope {subscription.scope}")

    disconnected = asyncio.create_task(_wait_for_disconnect(websocket))
    try:
        while True:
            getter = asyncio.create_task(latest.get())
            done, _ = await asyncio.wait(
                {getter, disconnected}, return_when=asyncio.FIRST_COMPLETED
            )
            if getter not in done:
                getter.cancel()
                break
            views: List[OrderView] = getter.result()
            # Only the newest list matters
            while not latest.empty():
                views = latest.get_nowait()

            filtered = query.apply(
                views,
                tab=tab,
                status_filter=status,
                product_filter=product,
                sort_key=sort,
                search_text=q,
            )
            await websocket.send_json(
                {
                    "event": "orders",
                    "version": subscription.version,
                    "orders": [to_response(v).model_dump(mode="json") for v in filtered],
                    "stats": query.order_stats(views),
                }
            )
    except WebSocketDisconnect:
        pass
    finally:
        disconnected.cancel()
        remove_listener()
        hub.release(subscription)
        logger.info(f"[STREAM] {actor.id} unsubscribed from scope {subscription.scope}")
