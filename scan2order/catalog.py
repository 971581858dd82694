"""
Static catalog for the counter: one product sold in several flavors, a short
drink list and a single add-on.

Nothing here is mutated at runtime. Prices are plain floats in the stall's
currency; totals are rounded once, when an order is submitted.
"""

from dataclasses import dataclass
from typing import Optional, Tuple


class CatalogLookupError(LookupError):
    """Raised when a flavor or drink id is not on the menu."""

    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"Unknown {kind}: {item_id}")


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    base_price: float
    description: str = ""


@dataclass(frozen=True)
class Flavor:
    id: str
    name: str
    price_delta: float = 0.0
    popular: bool = False


@dataclass(frozen=True)
class Drink:
    id: str
    name: str
    price: float

    @property
    def sku(self) -> str:
        return f"drink-{self.id}"


@dataclass(frozen=True)
class AddonOption:
    id: str
    name: str
    price: float


@dataclass(frozen=True)
class Catalog:
    """Read-only menu lookup."""

    product: Product
    flavors: Tuple[Flavor, ...]
    drinks: Tuple[Drink, ...] = ()
    addon: Optional[AddonOption] = None
    currency: str = "RM"

    def price_for(self, flavor: Flavor) -> float:
        """Base price plus the flavor's delta."""
        return self.product.base_price + (flavor.price_delta or 0.0)

    def get_flavor(self, flavor_id: str) -> Flavor:
        for flavor in self.flavors:
            if flavor.id == flavor_id:
                return flavor
        raise CatalogLookupError("flavor", flavor_id)

    def get_drink(self, drink_id: str) -> Drink:
        for drink in self.drinks:
            if drink.id == drink_id:
                return drink
        raise CatalogLookupError("drink", drink_id)

    def format_price(self, amount: float) -> str:
        return f"{self.currency} {amount:.2f}"


SOUFFLE = Product(
    id="souffle",
    name="Soufflé",
    base_price=12.0,
    description="Freshly made Japanese-style soufflé, fluffy, jiggly and made to order.",
)

FLAVORS: Tuple[Flavor, ...] = (
    Flavor("van", "Vanilla"),
    Flavor("cho", "Chocolate", 1.5, popular=True),
    Flavor("mat", "Matcha", 1.5, popular=True),
    Flavor("str", "Strawberry", 1.5),
    Flavor("mng", "Mango", 1.5),
    Flavor("egl", "Earl Grey", 1.5),
    Flavor("hoj", "Hojicha", 1.5),
    Flavor("blu", "Blueberry", 1.5),
    Flavor("bis", "Biscoff", 2.0),
)

DRINKS: Tuple[Drink, ...] = (
    Drink("lemon-tea", "Iced Lemon Tea", 3.0),
    Drink("latte", "Iced Latte", 6.5),
    Drink("matcha-latte", "Iced Matcha Latte", 7.0),
    Drink("water", "Mineral Water", 2.0),
)

WHIPPED_CREAM = AddonOption("cream", "Whipped Cream", 2.0)

CATALOG = Catalog(
    product=SOUFFLE,
    flavors=FLAVORS,
    drinks=DRINKS,
    addon=WHIPPED_CREAM,
)
