"""In-memory catalog provider."""
import yaml
from pathlib import Path
from typing import Optional
from printdesk.services.catalog.base import Catalog, CatalogProvider, ProductType


class InMemoryCatalogProvider(CatalogProvider):
    """In-memory catalog provider using YAML configuration."""

    def __init__(self, catalog_file: Optional[str] = None):
        """Initialize with optional catalog file path."""
        if not catalog_file:
            catalog_file = Path(__file__).parent / "data" / "products.yaml"
        self.catalog_file = Path(catalog_file)
        self._catalog: Optional[Catalog] = None

    async def _load_catalog(self) -> Catalog:
        """Load catalog from YAML file."""
        if self._catalog is None:
            if not self.catalog_file.exists():
                # Default catalog if file doesn't exist
                self._catalog = Catalog(
                    products=[
                        ProductType(id="mugs", name="Mugs"),
                        ProductType(id="t-shirts", name="T-Shirts"),
                        ProductType(id="hoodies", name="Hoodies"),
                        ProductType(id="bags", name="Bags"),
                        ProductType(id="caps", name="Caps"),
                        ProductType(id="other", name="Other"),
                    ]
                )
            else:
                with open(self.catalog_file, "r") as f:
                    data = yaml.safe_load(f) or {}
                    self._catalog = Catalog(
                        products=[ProductType(**p) for p in data.get("products", [])]
                    )
        return self._catalog

    async def get_catalog(self) -> Catalog:
        """Get the full catalog."""
        return await self._load_catalog()

    async def get_product(self, product_id: str) -> Optional[ProductType]:
        """Get a product type by id or name, case-insensitively."""
        catalog = await self._load_catalog()
        wanted = product_id.lower().strip()
        for product in catalog.products:
            if product.id.lower() == wanted or product.name.lower() == wanted:
                return product
        return None
