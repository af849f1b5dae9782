"""Product catalog provider interface."""
from abc import ABC, abstractmethod
from typing import List, Optional
from pydantic import BaseModel


class ProductType(BaseModel):
    """Catalog product type."""

    id: str
    name: str
    description: Optional[str] = None


class Catalog(BaseModel):
    """Catalog model."""

    products: List[ProductType]


class CatalogProvider(ABC):
    """Abstract base class for catalog providers."""

    @abstractmethod
    async def get_catalog(self) -> Catalog:
        """Get the full catalog."""
        pass

    @abstractmethod
    async def get_product(self, product_id: str) -> Optional[ProductType]:
        """Get a product type by id or name."""
        pass
