"""Product catalog API endpoints."""
import logging
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from typing import List, Optional

from printdesk.core.dependencies import get_catalog_repository
from printdesk.services.catalog.repository import CatalogRepository


router = APIRouter()
logger = logging.getLogger(__name__)


class ProductTypeResponse(BaseModel):
    """Product type response model."""
    id: str
    name: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class CatalogResponse(BaseModel):
    """Catalog response model."""
    products: List[ProductTypeResponse]


@router.get("/api/products", response_model=CatalogResponse)
async def get_catalog(
    request: Request,
    catalog_repository: CatalogRepository = Depends(get_catalog_repository),
):
    """Get the product types orders can be placed for."""
    logger.info(
        f"[CATALOG] Request received - Client: {request.client.host if request.client else 'unknown'}"
    )
    catalog = await catalog_repository.get_catalog()
    logger.info(f"[CATALOG] Catalog loaded - {len(catalog.products)} product types")
    return CatalogResponse(
        products=[ProductTypeResponse.model_validate(p) for p in catalog.products]
    )
