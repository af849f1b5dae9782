"""Order creation validation service."""
from typing import List

from printdesk.core.errors import ValidationError
from printdesk.services.catalog.repository import CatalogRepository
from printdesk.services.ordering.models import MAX_SUB_ORDERS, OrderCreate, SubOrderInput


class OrderValidator:
    """Service for validating orders before they are placed."""

    def __init__(self, catalog_repository: CatalogRepository):
        self.catalog_repository = catalog_repository

    def sub_order_errors(self, index: int, sub_order: SubOrderInput) -> List[str]:
        """
        Check one line item.

        Returns:
            List of error messages, prefixed with the 1-based item number
        """
        errors = []
        prefix = f"Sub-order #{index + 1}"
        if not sub_order.product_type or not sub_order.product_type.strip():
            errors.append(f"{prefix}: product type is required")
        if sub_order.quantity is None or sub_order.quantity <= 0:
            errors.append(f"{prefix}: quantity must be a positive number")
        if sub_order.delivery_time is None:
            errors.append(f"{prefix}: delivery time is required")
        for name in ("length", "width", "cmp"):
            value = getattr(sub_order, name)
            if value is not None and value <= 0:
                errors.append(f"{prefix}: {name} must be positive")
        return errors

    def validate(self, payload: OrderCreate) -> None:
        """Raise ValidationError listing every problem with ``payload``."""
        errors = []
        if not payload.sub_orders:
            errors.append("An order needs at least one sub-order")
        elif len(payload.sub_orders) > MAX_SUB_ORDERS:
            errors.append(f"An order can have at most {MAX_SUB_ORDERS} sub-orders")

        for index, sub_order in enumerate(payload.sub_orders):
            errors.extend(self.sub_order_errors(index, sub_order))

        if errors:
            raise ValidationError(errors[0], detail={"errors": errors})

    async def describe_product(self, product_type: str) -> dict:
        """Catalog fields to store on a sub-order for ``product_type``."""
        product_id, name, is_custom = await self.catalog_repository.resolve(product_type)
        return {
            "product_type": product_id,
            "product_type_name": name,
            "product_type_custom": is_custom,
        }
