"""Unit tests for the product catalog."""
import pytest
from printdesk.services.catalog.repository import CatalogRepository
from printdesk.services.catalog.in_memory_catalog import InMemoryCatalogProvider


class TestCatalogService:
    """Test catalog repository and provider."""

    @pytest.mark.asyncio
    async def test_load_bundled_catalog(self, test_catalog_repository):
        """Test loading the bundled YAML catalog."""
        catalog = await test_catalog_repository.get_catalog()

        ids = [p.id for p in catalog.products]
        assert ids == ["mugs", "t-shirts", "hoodies", "bags", "caps", "other"]

    @pytest.mark.asyncio
    async def test_get_product_case_insensitive(self, test_catalog_repository):
        """Test lookups match id or display name in any case."""
        assert (await test_catalog_repository.get_product("MUGS")).id == "mugs"
        assert (await test_catalog_repository.get_product("t-shirts")).name == "T-Shirts"
        assert (await test_catalog_repository.get_product(" Hoodies ")).id == "hoodies"
        assert await test_catalog_repository.get_product("stickers") is None

    @pytest.mark.asyncio
    async def test_resolve_known_product(self, test_catalog_repository):
        """Test resolve maps catalog names onto ids."""
        assert await test_catalog_repository.resolve("Caps") == ("caps", "Caps", False)

    @pytest.mark.asyncio
    async def test_resolve_custom_product(self, test_catalog_repository):
        """Test resolve keeps unknown products verbatim as custom."""
        assert await test_catalog_repository.resolve("  Enamel pins ") == (
            "Enamel pins", "Enamel pins", True
        )

    @pytest.mark.asyncio
    async def test_catalog_from_custom_file(self, tmp_path):
        """Test loading a catalog from a configured file."""
        catalog_file = tmp_path / "products.yaml"
        catalog_file.write_text(
            "products:\n"
            "  - id: stickers\n"
            "    name: Stickers\n"
            "    description: Vinyl die-cut\n"
        )
        repository = CatalogRepository(InMemoryCatalogProvider(str(catalog_file)))

        catalog = await repository.get_catalog()

        assert len(catalog.products) == 1
        assert catalog.products[0].description == "Vinyl die-cut"

    @pytest.mark.asyncio
    async def test_missing_file_falls_back_to_defaults(self, tmp_path):
        """Test a missing catalog file yields the default product list."""
        repository = CatalogRepository(InMemoryCatalogProvider(str(tmp_path / "nope.yaml")))

        catalog = await repository.get_catalog()

        assert "other" in [p.id for p in catalog.products]
