"""Order domain models."""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Literal author recorded on system-generated audit entries
SYSTEM_AUTHOR = "system"

# Upper bound on line items per order
MAX_SUB_ORDERS = 10


class OrderStatus(str, Enum):
    """Order lifecycle statuses."""

    PENDING_CONFIRMATION = "pending_confirmation"  # Client must confirm first
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        """Return the string value of the status."""
        return self.value


class SubOrderStatus(str, Enum):
    """Sub-order statuses. There is no confirmation state at this level."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


class ActorRole(str, Enum):
    """Role of whoever invokes an operation."""

    CLIENT = "client"
    MEMBER = "member"
    ADMIN = "admin"
    OWNER = "owner"

    @property
    def is_staff(self) -> bool:
        return self is not ActorRole.CLIENT

    def __str__(self) -> str:
        return self.value


class Actor(BaseModel):
    """The resolved caller of a command."""

    model_config = ConfigDict(frozen=True)

    id: str
    role: ActorRole = ActorRole.CLIENT
    name: Optional[str] = None
    email: Optional[str] = None

    @property
    def is_staff(self) -> bool:
        return self.role.is_staff

    @property
    def display_name(self) -> str:
        return self.name or self.email or "Unknown"


class SubOrderRecord(BaseModel):
    """Read-side snapshot of one sub-order."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    order_id: str
    product_type: str
    product_type_name: Optional[str] = None
    product_type_custom: bool = False
    quantity: int
    length: Optional[float] = None
    width: Optional[float] = None
    cmp: Optional[float] = None
    description: Optional[str] = None
    design_file: Optional[str] = None
    design_file_path: Optional[str] = None
    delivery_time: Optional[datetime] = None
    notes: Optional[str] = None
    status: SubOrderStatus = SubOrderStatus.PENDING
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderRecord(BaseModel):
    """Read-side snapshot of an order document, without its sub-orders."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    user_id: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    display_name: Optional[str] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    client_phone: Optional[str] = None
    client_company: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING_CONFIRMATION
    confirmed_by_client: bool = False
    confirmed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def short_id(self) -> str:
        """Stable human-facing fragment, e.g. ``#1A2B3C4D``."""
        return f"#{self.id[:8].upper()}"


class OrderView(BaseModel):
    """An order joined with its sub-orders plus derived totals."""

    model_config = ConfigDict(frozen=True)

    order: OrderRecord
    sub_orders: List[SubOrderRecord] = []
    item_count: int = 0
    total_quantity: int = 0
    earliest_delivery: Optional[datetime] = None
    can_complete: bool = True
    incomplete_sub_order_ids: List[str] = []
    degraded: bool = False  # Sub-order fetch failed; sub_orders is a stand-in

    @property
    def id(self) -> str:
        return self.order.id

    @property
    def status(self) -> OrderStatus:
        return self.order.status


class Attachment(BaseModel):
    """Reference to an uploaded file."""

    url: str
    name: str
    media_type: Optional[str] = None


class UpdateRecord(BaseModel):
    """One entry of an order's audit/chat trail."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    order_id: str
    user_id: str
    user_name: str
    user_email: Optional[str] = None
    text: str = ""
    is_system: bool = False
    is_staff: bool = False
    attachment_url: Optional[str] = None
    attachment_name: Optional[str] = None
    attachment_type: Optional[str] = None
    created_at: Optional[datetime] = None


class NotificationRecord(BaseModel):
    """A notification addressed to one user."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    user_id: str
    type: str
    title: str
    message: str
    order_id: Optional[str] = None
    read: bool = False
    created_at: Optional[datetime] = None


class SubOrderInput(BaseModel):
    """A line item as submitted when placing an order."""

    product_type: Optional[str] = None
    quantity: Optional[int] = None
    length: Optional[float] = None
    width: Optional[float] = None
    cmp: Optional[float] = None
    description: str = ""
    design_file: Optional[str] = None
    design_file_path: Optional[str] = None
    delivery_time: Optional[datetime] = None
    notes: str = ""


class ClientContact(BaseModel):
    """Client contact details copied onto the order."""

    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None


class OrderCreate(BaseModel):
    """Payload for placing a new order."""

    display_name: Optional[str] = None
    client: ClientContact = Field(default_factory=ClientContact)
    sub_orders: List[SubOrderInput] = []
