"""
Catalog Schemas
===============

Pydantic models for the product data the pricing and stock engine consumes.
Rows coming from the product backend are validated once, here, and every
loosely typed field is coerced to a documented default:

| Field                       | Default / fallback                          |
|-----------------------------|---------------------------------------------|
| price                       | 0.0 when missing or malformed               |
| sale_price                  | None (no override)                          |
| max_included_quantity       | None (no included-addon threshold)          |
| excess_unit_price           | None (stored, not used for pricing)         |
| daily_stock                 | None (stock not tracked, unlimited)         |
| current_stock               | None (treated as full daily stock)          |
| stock_last_reset            | None (never reset)                          |
| allow_same_day_scheduling   | True                                        |

Usage:
------
    product = Product.coerce({"id": "p1", "price": "12.50", "daily_stock": 10})
    item = CartItem(product=product, quantity=2, addons=[{"price": 3}])
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ._coerce import to_bool, to_float, to_int, to_local_datetime, to_optional_str


class Product(BaseModel):
    """
    A sellable product, limited to the fields pricing and stock care about.

    Attributes:
        id: Opaque unique identifier
        name: Display name
        price: Base unit price
        sale_price: Effective unit price when set (and non-zero)
        max_included_quantity: Addon units bundled into the base price
        excess_unit_price: Informational flat surcharge per excess addon unit
        daily_stock: Units available per calendar day (None = unlimited)
        current_stock: Units left today (meaningful only with daily_stock)
        stock_last_reset: When current_stock was last reset to daily_stock
        allow_same_day_scheduling: Whether the product can be fulfilled today
        store_id: Owning store
    """
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: Optional[str] = None
    name: Optional[str] = None
    price: float = 0.0
    sale_price: Optional[float] = None
    max_included_quantity: Optional[int] = None
    excess_unit_price: Optional[float] = None
    daily_stock: Optional[int] = None
    current_stock: Optional[int] = None
    stock_last_reset: Optional[datetime] = None
    allow_same_day_scheduling: bool = True
    store_id: Optional[str] = None

    @field_validator("id", "name", "store_id", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        return to_optional_str(v)

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, v):
        return max(to_float(v, 0.0), 0.0)

    @field_validator("sale_price", "excess_unit_price", mode="before")
    @classmethod
    def _coerce_optional_price(cls, v):
        result = to_float(v, None)
        if result is None or result < 0:
            return None
        return result

    @field_validator("max_included_quantity", "daily_stock", "current_stock", mode="before")
    @classmethod
    def _coerce_optional_count(cls, v):
        result = to_int(v, None)
        if result is None or result < 0:
            return None
        return result

    @field_validator("stock_last_reset", mode="before")
    @classmethod
    def _coerce_reset(cls, v):
        return to_local_datetime(v)

    @field_validator("allow_same_day_scheduling", mode="before")
    @classmethod
    def _coerce_same_day(cls, v):
        return to_bool(v, True)

    @property
    def tracks_stock(self) -> bool:
        """True when the product has a daily stock limit."""
        return self.daily_stock is not None

    @property
    def unit_price(self) -> float:
        """Sale price when set and non-zero, otherwise the base price."""
        return self.sale_price or self.price

    @classmethod
    def coerce(cls, obj: Any) -> "Product":
        """Build a Product from a dict, an ORM row, or another Product."""
        if isinstance(obj, cls):
            return obj
        try:
            return cls.model_validate(obj if obj is not None else {})
        except ValidationError:
            return cls()


class ProductAddon(BaseModel):
    """
    An addon selected on a cart line.

    ``quantity`` is None when the caller did not specify one, which counts as
    a single unit. Explicit zero or negative quantities are kept as-is and
    excluded from billing.
    """
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: Optional[str] = None
    name: Optional[str] = None
    price: float = 0.0
    quantity: Optional[int] = None

    @field_validator("id", "name", mode="before")
    @classmethod
    def _coerce_str(cls, v):
        return to_optional_str(v)

    @field_validator("price", mode="before")
    @classmethod
    def _coerce_price(cls, v):
        return max(to_float(v, 0.0), 0.0)

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, v):
        return to_int(v, None)

    @property
    def units(self) -> int:
        """Billable units: 1 when unspecified, 0 when explicitly non-positive."""
        if self.quantity is None:
            return 1
        return max(self.quantity, 0)

    @classmethod
    def coerce(cls, obj: Any) -> Optional["ProductAddon"]:
        """
        Build an addon from a dict, an ORM row, or another ProductAddon.

        Returns None for plain values (strings, numbers, None) and for
        entries that cannot be read as an addon.
        """
        if isinstance(obj, cls):
            return obj
        if obj is None or isinstance(obj, (str, bytes, int, float, list, tuple)):
            return None
        try:
            return cls.model_validate(obj, from_attributes=True)
        except ValidationError:
            return None


class CartItem(BaseModel):
    """One cart line: a product, how many, the chosen addons and free-text notes."""

    product: Product
    quantity: int = 1
    addons: List[ProductAddon] = []
    notes: str = ""

    @field_validator("product", mode="before")
    @classmethod
    def _coerce_product(cls, v):
        return Product.coerce(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def _coerce_quantity(cls, v):
        return max(to_int(v, 0), 0)

    @field_validator("addons", mode="before")
    @classmethod
    def _coerce_addons(cls, v):
        if not isinstance(v, (list, tuple)):
            return []
        return [addon for addon in map(ProductAddon.coerce, v) if addon is not None]

    @field_validator("notes", mode="before")
    @classmethod
    def _coerce_notes(cls, v):
        return v if isinstance(v, str) else ""


class PricingCalculation(BaseModel):
    """Result of pricing one cart line."""

    product_total: float = 0.0
    addons_total: float = 0.0
    total: float = 0.0
