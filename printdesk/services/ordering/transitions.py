"""Status transition rules for orders and sub-orders.

Decisions are plain data: every check returns either ``Allow`` (with the
directives the write path must carry out) or ``Deny`` (with a reason and
the error category to surface). Nothing here touches storage.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Mapping, Optional, Tuple, Union

from printdesk.core.errors import (
    OrderLifecycleError,
    PermissionDeniedError,
    ValidationError,
)
from printdesk.services.audit import tokens
from printdesk.services.ordering.models import (
    Actor,
    ActorRole,
    OrderRecord,
    OrderStatus,
    SubOrderStatus,
    UpdateRecord,
)


class DenyKind(str, Enum):
    """Error category a denial maps to."""

    VALIDATION = "validation"
    PERMISSION = "permission"


@dataclass(frozen=True)
class Allow:
    """Transition permitted.

    ``audit_text`` is the system entry to append after the write,
    ``notification`` the notification type to emit (if any).
    """

    target: Optional[str] = None
    audit_text: Optional[str] = None
    notification: Optional[str] = None
    allowed: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Deny:
    """Transition refused."""

    reason: str
    kind: DenyKind = DenyKind.VALIDATION
    offending_sub_order_ids: Tuple[str, ...] = ()
    allowed: bool = field(default=False, init=False)

    def to_error(self) -> OrderLifecycleError:
        detail = {}
        if self.offending_sub_order_ids:
            detail["sub_order_ids"] = list(self.offending_sub_order_ids)
        if self.kind is DenyKind.PERMISSION:
            return PermissionDeniedError(self.reason, detail=detail)
        return ValidationError(self.reason, detail=detail)


Decision = Union[Allow, Deny]


def raise_for_denial(decision: Decision) -> Allow:
    """Return the Allow, or raise the typed error a Deny describes."""
    if isinstance(decision, Deny):
        raise decision.to_error()
    return decision


_NO_TARGETS: FrozenSet[OrderStatus] = frozenset()

# Generic status-setter targets for staff, keyed by current status.
# pending_confirmation is left only through confirmation, never from here.
_STAFF_ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING_CONFIRMATION: _NO_TARGETS,
    OrderStatus.PENDING: frozenset(
        {OrderStatus.IN_PROGRESS, OrderStatus.COMPLETED, OrderStatus.CANCELLED}
    ),
    OrderStatus.IN_PROGRESS: frozenset(
        {OrderStatus.PENDING, OrderStatus.COMPLETED, OrderStatus.CANCELLED}
    ),
    OrderStatus.COMPLETED: frozenset(
        {OrderStatus.PENDING, OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED}
    ),
    OrderStatus.CANCELLED: frozenset(
        {OrderStatus.PENDING, OrderStatus.IN_PROGRESS, OrderStatus.COMPLETED}
    ),
}

# role -> current status -> allowed targets
ORDER_TRANSITIONS: Dict[ActorRole, Dict[OrderStatus, FrozenSet[OrderStatus]]] = {
    ActorRole.CLIENT: {status: _NO_TARGETS for status in OrderStatus},
    ActorRole.MEMBER: _STAFF_ORDER_TRANSITIONS,
    ActorRole.ADMIN: _STAFF_ORDER_TRANSITIONS,
    ActorRole.OWNER: _STAFF_ORDER_TRANSITIONS,
}

_STAFF_SUB_ORDER_TRANSITIONS: Dict[SubOrderStatus, FrozenSet[SubOrderStatus]] = {
    status: frozenset(s for s in SubOrderStatus if s is not status)
    for status in SubOrderStatus
}

SUB_ORDER_TRANSITIONS: Dict[ActorRole, Dict[SubOrderStatus, FrozenSet[SubOrderStatus]]] = {
    ActorRole.CLIENT: {status: frozenset() for status in SubOrderStatus},
    ActorRole.MEMBER: _STAFF_SUB_ORDER_TRANSITIONS,
    ActorRole.ADMIN: _STAFF_SUB_ORDER_TRANSITIONS,
    ActorRole.OWNER: _STAFF_SUB_ORDER_TRANSITIONS,
}


def incomplete_sub_orders(sub_order_statuses: Mapping[str, SubOrderStatus]) -> Tuple[str, ...]:
    """Ids of sub-orders that block completion, in a stable order."""
    return tuple(
        sub_id
        for sub_id, status in sorted(sub_order_statuses.items())
        if SubOrderStatus(status) is not SubOrderStatus.COMPLETED
    )


def validate_order_transition(
    current: OrderStatus,
    requested: str,
    actor_role: ActorRole,
    sub_order_statuses: Mapping[str, SubOrderStatus],
) -> Decision:
    """Decide whether the generic status setter may move an order."""
    role = ActorRole(actor_role)
    if not role.is_staff:
        return Deny("Only team members can change order status", DenyKind.PERMISSION)

    if requested == OrderStatus.PENDING_CONFIRMATION.value:
        return Deny("pending_confirmation can only be set when an order is created")
    try:
        target = OrderStatus(requested)
    except ValueError:
        return Deny(f"Unknown order status '{requested}'")

    current = OrderStatus(current)
    if target is current:
        return Deny(f"Order is already {current.value}")

    if target not in ORDER_TRANSITIONS[role][current]:
        if current is OrderStatus.PENDING_CONFIRMATION:
            return Deny("Order must be confirmed by the client before its status can change")
        return Deny(f"Cannot move order from {current.value} to {target.value}")

    if target is OrderStatus.COMPLETED:
        blocking = incomplete_sub_orders(sub_order_statuses)
        if blocking:
            return Deny(
                f"Cannot complete order: sub-order {blocking[0]} is not completed",
                offending_sub_order_ids=blocking,
            )

    return Allow(target=target.value, audit_text=tokens.order_status_changed(target.value))


def validate_sub_order_transition(
    sub_order_id: str,
    current: SubOrderStatus,
    requested: str,
    actor_role: ActorRole,
    order_id: Optional[str] = None,
    order_status: Optional[OrderStatus] = None,
) -> Decision:
    """Decide whether a sub-order may move.

    The only cross-entity rule: a completed sub-order of a completed order
    stays completed until the order itself is reopened.
    """
    role = ActorRole(actor_role)
    if not role.is_staff:
        return Deny("Only team members can change sub-order status", DenyKind.PERMISSION)

    if requested == OrderStatus.PENDING_CONFIRMATION.value:
        return Deny("Sub-orders have no confirmation state")
    try:
        target = SubOrderStatus(requested)
    except ValueError:
        return Deny(f"Unknown sub-order status '{requested}'")

    current = SubOrderStatus(current)
    if target is current:
        return Deny(f"Sub-order is already {current.value}")
    if target not in SUB_ORDER_TRANSITIONS[role][current]:
        return Deny(f"Cannot move sub-order from {current.value} to {target.value}")

    if order_status is not None and OrderStatus(order_status) is OrderStatus.COMPLETED:
        parent = f"Order {order_id}" if order_id else "The order"
        return Deny(
            f"{parent} is completed; reopen it before changing sub-order {sub_order_id}"
        )

    return Allow(
        target=target.value,
        audit_text=tokens.sub_order_status_changed(sub_order_id, target.value),
    )


def validate_confirmation(order: OrderRecord, actor: Actor) -> Decision:
    """Decide whether ``actor`` may confirm ``order``.

    Confirmation is a one-shot: pending_confirmation -> pending, flipping
    confirmed_by_client to True for good.
    """
    if order.confirmed_by_client:
        return Deny("Order has already been confirmed")
    if order.status is not OrderStatus.PENDING_CONFIRMATION:
        return Deny(f"Order is {order.status.value}, not awaiting confirmation")
    if not actor.is_staff and actor.id not in (order.user_id, order.client_id):
        return Deny("Clients can only confirm their own orders", DenyKind.PERMISSION)
    return Allow(
        target=OrderStatus.PENDING.value,
        audit_text=tokens.ORDER_CONFIRMED_BY_CLIENT,
        notification="order_confirmed",
    )


def validate_update_deletion(
    update: UpdateRecord, actor: Actor, current_status: OrderStatus
) -> Decision:
    """Decide whether ``actor`` may delete an audit entry.

    Staff only. A system entry recording the order's current status stays,
    so the trail always explains where the order is now.
    """
    if not actor.is_staff:
        return Deny("Only team members can delete updates", DenyKind.PERMISSION)
    if update.is_system and tokens.parse_order_status(update.text) == OrderStatus(current_status).value:
        return Deny("This entry records the order's current status and cannot be deleted")
    return Allow()


def can_view_order(order: OrderRecord, actor: Actor) -> bool:
    """Staff see every order; clients see orders they placed or own."""
    return actor.is_staff or actor.id in (order.user_id, order.client_id)
