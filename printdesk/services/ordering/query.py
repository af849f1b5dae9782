"""In-memory filtering, searching and sorting of aggregated order views."""
from datetime import datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from printdesk.services.ordering.models import OrderStatus, OrderView, SubOrderRecord

ALL = "all"


class Tab(str, Enum):
    """Dashboard tabs. Every status belongs to exactly one."""

    CURRENT = "current"
    PAST = "past"

    def __str__(self) -> str:
        return self.value


class SortKey(str, Enum):
    """Available orderings for the operator list."""

    DELIVERY_ASC = "delivery-asc"
    DELIVERY_DESC = "delivery-desc"
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    QUANTITY_DESC = "quantity-desc"
    QUANTITY_ASC = "quantity-asc"
    STATUS = "status"

    def __str__(self) -> str:
        return self.value


TAB_STATUSES: Dict[Tab, frozenset] = {
    Tab.CURRENT: frozenset(
        {OrderStatus.PENDING_CONFIRMATION, OrderStatus.PENDING, OrderStatus.IN_PROGRESS}
    ),
    Tab.PAST: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
}


def tab_of(status: OrderStatus) -> Tab:
    """Return the tab an order with ``status`` is listed under."""
    return Tab.PAST if OrderStatus(status) in TAB_STATUSES[Tab.PAST] else Tab.CURRENT


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    elif isinstance(value, float) and value.is_integer():
        # 10.0 is shown (and searched) as "10"
        value = int(value)
    return str(value).lower()


def _order_fields(view: OrderView) -> list:
    order = view.order
    return [
        order.id,
        order.client_name,
        order.client_email,
        order.client_phone,
        order.client_company,
        order.user_name,
        order.user_email,
        order.status,
    ]


def _sub_order_fields(so: SubOrderRecord) -> list:
    return [
        so.product_type,
        so.product_type_name,
        so.quantity,
        so.length,
        so.width,
        so.cmp,
        so.description,
        so.design_file,
        so.notes,
        so.status,
    ]


def matches_search(view: OrderView, search_text: str) -> bool:
    """Case-insensitive substring match over order and sub-order fields."""
    query = search_text.lower()
    if not query:
        return True
    if any(query in _text(value) for value in _order_fields(view)):
        return True
    return any(
        query in _text(value)
        for so in view.sub_orders
        for value in _sub_order_fields(so)
    )


def _created(view: OrderView) -> datetime:
    return view.order.created_at or datetime.min


def sort_views(views: Iterable[OrderView], sort_key: str) -> List[OrderView]:
    """Return a new list ordered by ``sort_key``.

    Views without any delivery time go last for both delivery orderings.
    """
    key = SortKey(sort_key)
    views = list(views)

    if key in (SortKey.DELIVERY_ASC, SortKey.DELIVERY_DESC):
        dated = [v for v in views if v.earliest_delivery is not None]
        undated = [v for v in views if v.earliest_delivery is None]
        dated.sort(key=lambda v: v.earliest_delivery, reverse=key is SortKey.DELIVERY_DESC)
        return dated + undated
    if key is SortKey.DATE_DESC:
        return sorted(views, key=_created, reverse=True)
    if key is SortKey.DATE_ASC:
        return sorted(views, key=_created)
    if key is SortKey.QUANTITY_DESC:
        return sorted(views, key=lambda v: v.total_quantity, reverse=True)
    if key is SortKey.QUANTITY_ASC:
        return sorted(views, key=lambda v: v.total_quantity)
    return sorted(views, key=lambda v: v.status.value)


def apply(
    views: Sequence[OrderView],
    tab: Optional[str] = Tab.CURRENT.value,
    status_filter: Optional[str] = None,
    product_filter: Optional[str] = None,
    sort_key: str = SortKey.DELIVERY_ASC.value,
    search_text: Optional[str] = None,
) -> List[OrderView]:
    """
    Produce the operator-facing list.

    Args:
        views: Aggregated views, as published by the synchronizer
        tab: "current", "past", or None/"all" for both
        status_filter: Exact order status, or None/"all"
        product_filter: Product type any sub-order must have, or None/"all"
        sort_key: One of SortKey
        search_text: Free text matched against order and sub-order fields

    Returns:
        A new list; ``views`` is left untouched
    """
    result = list(views)

    if tab and tab != ALL:
        statuses = TAB_STATUSES[Tab(tab)]
        result = [v for v in result if v.status in statuses]

    if status_filter and status_filter != ALL:
        result = [v for v in result if v.status.value == status_filter]

    if product_filter and product_filter != ALL:
        result = [
            v for v in result
            if any(so.product_type == product_filter for so in v.sub_orders)
        ]

    if search_text:
        result = [v for v in result if matches_search(v, search_text)]

    return sort_views(result, sort_key)


def order_stats(views: Iterable[OrderView]) -> Dict[str, int]:
    """Headline counts for the dashboard cards."""
    views = list(views)
    return {
        "total": len(views),
        "pending": sum(1 for v in views if v.status is OrderStatus.PENDING),
        "in_progress": sum(1 for v in views if v.status is OrderStatus.IN_PROGRESS),
        "completed": sum(1 for v in views if v.status is OrderStatus.COMPLETED),
    }
