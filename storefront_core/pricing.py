"""
Pricing Engine for Cart Lines.

Computes the price of one cart line (product, quantity, selected addons).

Products may declare ``max_included_quantity``: the number of addon units
bundled into the product's base price. When such a product has addons, one
of three rules applies:

1. Fewer addon units than the threshold: the product itself is free and the
   customer pays for every addon unit.
2. Exactly the threshold: the customer pays the product price, addons are
   included.
3. More than the threshold: the customer pays the product price plus the
   excess units, billed from the most expensive addon downwards.

Without a threshold (or without addons) the product price and every addon
unit are charged.

Addons with an explicit zero or negative quantity are ignored entirely;
addons without a quantity count as one unit.
"""

import logging
from typing import Any, Iterable, List

from .schemas._coerce import to_float
from .schemas.catalog import PricingCalculation, Product, ProductAddon

logger = logging.getLogger(__name__)


def _billable_addons(addons: Iterable[Any]) -> List[ProductAddon]:
    """Validate raw addon entries and drop the ones with no billable units."""
    result: List[ProductAddon] = []
    for addon in addons or []:
        parsed = ProductAddon.coerce(addon)
        if parsed is not None and parsed.units > 0:
            result.append(parsed)
    return result


def _full_addon_price(addons: List[ProductAddon]) -> float:
    return sum(addon.price * addon.units for addon in addons)


def _excess_addon_price(addons: List[ProductAddon], excess_units: int) -> float:
    """Price of the ``excess_units`` most expensive addon units."""
    remaining = excess_units
    total = 0.0
    for addon in sorted(addons, key=lambda a: a.price, reverse=True):
        if remaining <= 0:
            break
        chargeable = min(addon.units, remaining)
        total += addon.price * chargeable
        remaining -= chargeable
    return total


def calculate_pricing(product: Any, quantity: Any, addons: Iterable[Any] = ()) -> PricingCalculation:
    """
    Price one cart line.

    Args:
        product: Product model, dict or ORM row
        quantity: Number of product units (malformed values count as 0)
        addons: Selected addons (ProductAddon models or dicts)

    Returns:
        PricingCalculation with product_total, addons_total and total
    """
    product = Product.coerce(product)
    qty = max(to_float(quantity, 0.0), 0.0)
    billable = _billable_addons(addons)
    unit_price = product.unit_price
    threshold = product.max_included_quantity

    if threshold and billable:
        total_units = sum(addon.units for addon in billable)

        if total_units < threshold:
            product_total = 0.0
            addons_total = _full_addon_price(billable) * qty
        elif total_units == threshold:
            product_total = unit_price * qty
            addons_total = 0.0
        else:
            product_total = unit_price * qty
            addons_total = _excess_addon_price(billable, total_units - threshold) * qty

        logger.debug(
            "Priced %s with threshold %d: %d addon units, product=%.2f addons=%.2f",
            product.id, threshold, total_units, product_total, addons_total,
        )
    else:
        product_total = unit_price * qty
        addons_total = _full_addon_price(billable) * qty

    return PricingCalculation(
        product_total=product_total,
        addons_total=addons_total,
        total=product_total + addons_total,
    )


class PricingCalculator:
    """Legacy facade kept for callers that expect the older result keys."""

    @staticmethod
    def calculate_product_price(product: Any, quantity: Any, addons: Iterable[Any] = ()) -> dict:
        calculation = calculate_pricing(product, quantity, addons)
        return {
            "total_price": calculation.total,
            "product_price": calculation.product_total,
            "addons_price": calculation.addons_total,
        }
