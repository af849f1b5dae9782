"""Message tokens for system-authored audit entries.

System entries store a token instead of prose; the presentation layer
resolves it to display text in the reader's language.
"""
from typing import Optional

ORDER_CREATED_BY_CLIENT = "order.createdByClient"
ORDER_CREATED_BY_TEAM = "order.createdByTeam"
ORDER_CONFIRMED_BY_CLIENT = "order.confirmedByClient"

_ORDER_STATUS_PREFIX = "order.statusChanged:"
_SUB_ORDER_STATUS_PREFIX = "subOrder.statusChanged:"


def order_status_changed(status: str) -> str:
    return f"{_ORDER_STATUS_PREFIX}{status}"


def sub_order_status_changed(sub_order_id: str, status: str) -> str:
    return f"{_SUB_ORDER_STATUS_PREFIX}{sub_order_id}:{status}"


def parse_order_status(text: str) -> Optional[str]:
    """Return the status named by an order status token, else None."""
    if text.startswith(_ORDER_STATUS_PREFIX):
        return text[len(_ORDER_STATUS_PREFIX):]
    return None
