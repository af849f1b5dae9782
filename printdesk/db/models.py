"""Database models."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    """Opaque document identifier."""
    return uuid.uuid4().hex


class Order(Base):
    """Order model."""

    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String, index=True, nullable=False)
    user_name = Column(String, nullable=True)
    user_email = Column(String, nullable=True)
    display_name = Column(String, nullable=True)

    # Client contact snapshot, captured at creation
    client_id = Column(String, index=True, nullable=True)
    client_name = Column(String, nullable=True)
    client_email = Column(String, nullable=True)
    client_phone = Column(String, nullable=True)
    client_company = Column(String, nullable=True)

    status = Column(String, default="pending_confirmation", nullable=False)
    confirmed_by_client = Column(Boolean, default=False, nullable=False)
    confirmed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    sub_orders = relationship(
        "SubOrder", back_populates="order", cascade="all, delete-orphan"
    )


class SubOrder(Base):
    """Sub-order (line item) model."""

    __tablename__ = "sub_orders"

    id = Column(String(32), primary_key=True, default=new_id)
    order_id = Column(String(32), ForeignKey("orders.id"), index=True, nullable=False)
    product_type = Column(String, nullable=False)
    product_type_name = Column(String, nullable=True)
    product_type_custom = Column(Boolean, default=False, nullable=False)
    quantity = Column(Integer, nullable=False)
    length = Column(Float, nullable=True)
    width = Column(Float, nullable=True)
    cmp = Column(Float, nullable=True)
    description = Column(Text, nullable=True)
    design_file = Column(String, nullable=True)
    design_file_path = Column(String, nullable=True)
    delivery_time = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String, default="pending", nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    order = relationship("Order", back_populates="sub_orders")


class OrderUpdate(Base):
    """Audit/chat trail entry. Rows are inserted and deleted, never updated."""

    __tablename__ = "order_updates"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(32), ForeignKey("orders.id"), index=True, nullable=False)
    user_id = Column(String, nullable=False)
    user_name = Column(String, nullable=False)
    user_email = Column(String, nullable=True)
    text = Column(Text, default="", nullable=False)
    is_system = Column(Boolean, default=False, nullable=False)
    is_staff = Column(Boolean, default=False, nullable=False)
    attachment_url = Column(String, nullable=True)
    attachment_name = Column(String, nullable=True)
    attachment_type = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Notification(Base):
    """Notification model."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, index=True, nullable=False)
    type = Column(String, nullable=False)  # order_created, order_confirmed
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    order_id = Column(String(32), ForeignKey("orders.id"), index=True, nullable=True)
    read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
