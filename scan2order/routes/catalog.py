"""
Catalog Routes
==============

- GET /catalog: flavors, drinks and the add-on with prices already resolved
"""

from fastapi import APIRouter, Depends

from ..catalog import Catalog
from ..dependencies import get_catalog
from ..schemas.catalog import CatalogOut, catalog_to_out

catalog_router = APIRouter(tags=["Catalog"])


@catalog_router.get("/catalog", response_model=CatalogOut)
def get_catalog_view(catalog: Catalog = Depends(get_catalog)) -> CatalogOut:
    return catalog_to_out(catalog)
