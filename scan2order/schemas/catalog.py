"""Catalog payload served to the customer view."""

from typing import List, Optional

from ..catalog import Catalog
from ..domain import CamelModel


class ProductOut(CamelModel):
    id: str
    name: str
    base_price: float
    description: str = ""


class FlavorOut(CamelModel):
    id: str
    name: str
    price_delta: float
    price: float
    popular: bool


class DrinkOut(CamelModel):
    id: str
    sku: str
    name: str
    price: float


class AddonOut(CamelModel):
    id: str
    name: str
    price: float


class CatalogOut(CamelModel):
    product: ProductOut
    flavors: List[FlavorOut]
    drinks: List[DrinkOut]
    addon: Optional[AddonOut] = None
    currency: str


def catalog_to_out(catalog: Catalog) -> CatalogOut:
    product = catalog.product
    return CatalogOut(
        product=ProductOut(
            id=product.id,
            name=product.name,
            base_price=product.base_price,
            description=product.description,
        ),
        flavors=[
            FlavorOut(
                id=f.id,
                name=f.name,
                price_delta=f.price_delta,
                price=catalog.price_for(f),
                popular=f.popular,
            )
            for f in catalog.flavors
        ],
        drinks=[DrinkOut(id=d.id, sku=d.sku, name=d.name, price=d.price) for d in catalog.drinks],
        addon=(
            AddonOut(id=catalog.addon.id, name=catalog.addon.name, price=catalog.addon.price)
            if catalog.addon else None
        ),
        currency=catalog.currency,
    )
