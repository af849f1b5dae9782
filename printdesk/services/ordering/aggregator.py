"""Join an order with its sub-orders into an aggregated view."""
from datetime import datetime
from typing import Iterable, Optional, Sequence

from printdesk.services.ordering.models import (
    OrderRecord,
    OrderView,
    SubOrderRecord,
    SubOrderStatus,
)
from printdesk.services.ordering.transitions import incomplete_sub_orders


def earliest_delivery_time(sub_orders: Iterable[SubOrderRecord]) -> Optional[datetime]:
    """Earliest delivery time among sub-orders that have one."""
    times = [so.delivery_time for so in sub_orders if so.delivery_time is not None]
    if not times:
        return None
    return min(times)


def total_quantity(sub_orders: Iterable[SubOrderRecord]) -> int:
    return sum(so.quantity or 0 for so in sub_orders)


def aggregate(
    order: OrderRecord,
    sub_orders: Sequence[SubOrderRecord],
    degraded: bool = False,
) -> OrderView:
    """
    Build the aggregated view of one order.

    Pure: the same (order, sub_orders) always yields the same view. Sub-orders
    are ordered by (created_at, id) so the output does not depend on the order
    the store happened to return them in.

    Args:
        order: The parent order snapshot
        sub_orders: Its current sub-order set (any order)
        degraded: Mark the view as standing in for a failed sub-order fetch

    Returns:
        OrderView with item count, total quantity, earliest delivery and the
        completion gate
    """
    ordered = sorted(
        (so for so in sub_orders if so.order_id == order.id),
        key=lambda so: (so.created_at or datetime.min, so.id),
    )
    blocking = incomplete_sub_orders({so.id: SubOrderStatus(so.status) for so in ordered})
    return OrderView(
        order=order,
        sub_orders=ordered,
        item_count=len(ordered),
        total_quantity=total_quantity(ordered),
        earliest_delivery=earliest_delivery_time(ordered),
        can_complete=not blocking,
        incomplete_sub_order_ids=list(blocking),
        degraded=degraded,
    )
