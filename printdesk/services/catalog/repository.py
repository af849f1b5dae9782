"""Product catalog repository."""
from typing import Optional, Tuple
from printdesk.services.catalog.base import Catalog, CatalogProvider, ProductType


class CatalogRepository:
    """Repository for catalog lookups."""

    def __init__(self, provider: CatalogProvider):
        self.provider = provider

    async def get_catalog(self) -> Catalog:
        """Get the full catalog."""
        return await self.provider.get_catalog()

    async def get_product(self, product_id: str) -> Optional[ProductType]:
        """Get product type by id or name."""
        return await self.provider.get_product(product_id)

    async def resolve(self, product_type: str) -> Tuple[str, str, bool]:
        """
        Resolve a submitted product type.

        Returns:
            Tuple of (product_type, display_name, is_custom). Values not in the
            catalog are kept verbatim as custom products.
        """
        raw = product_type.strip()
        product = await self.get_product(raw)
        if product is None:
            return raw, raw, True
        return product.id, product.name, False
