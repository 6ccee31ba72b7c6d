"""
Daily Stock Rules.

Products may carry a ``daily_stock``: the number of units that can be sold
per calendar day. ``current_stock`` counts what is left today and is reset to
``daily_stock`` once per local calendar day. Products without
``daily_stock`` are not tracked and are always available.

All functions here are pure: they never mutate the product passed in and
return updated copies instead. The answers are advisory. The authoritative
decrement happens in the backing store when an order is committed (see
``storefront_core.inventory``).
"""

import logging
from datetime import datetime
from typing import Any, Iterable, List, Optional

from .clock import hhmm_to_minutes, minutes_of_day
from .schemas._coerce import to_int
from .schemas.catalog import Product
from .schemas.stores import Store

logger = logging.getLogger(__name__)


def _now(now: Optional[datetime]) -> datetime:
    return now if now is not None else datetime.now()


def was_reset_on(product: Product, day: datetime) -> bool:
    """True when the product's last reset happened on ``day``'s calendar date."""
    if product.stock_last_reset is None:
        return False
    return product.stock_last_reset.date() == day.date()


def needs_reset(product: Product, now: datetime) -> bool:
    """True for tracked products whose last reset is dated before ``now``'s date."""
    if not product.tracks_stock:
        return False
    if product.stock_last_reset is None:
        return True
    return product.stock_last_reset.date() < now.date()


class StockManager:
    """Stateless daily-stock rules. Every method accepts an explicit ``now``."""

    @staticmethod
    def check_daily_stock(product: Any, now: Optional[datetime] = None) -> bool:
        """
        Is the product in stock at ``now``?

        If the stock has not been reset yet on ``now``'s date, the reset is
        assumed to happen before serving, so the full ``daily_stock`` counts.
        """
        product = Product.coerce(product)
        if not product.tracks_stock:
            return True

        if not was_reset_on(product, _now(now)):
            return product.daily_stock > 0

        return (product.current_stock or 0) > 0

    @staticmethod
    def reset_daily_stock(products: Iterable[Any], now: Optional[datetime] = None) -> List[Product]:
        """
        Reset every tracked product not yet reset today.

        Products already reset on ``now``'s date are returned unchanged, so
        calling this repeatedly on the same day is a no-op.
        """
        now = _now(now)
        result: List[Product] = []
        reset_count = 0
        for raw in products or []:
            product = Product.coerce(raw)
            if needs_reset(product, now):
                product = product.model_copy(
                    update={"current_stock": product.daily_stock, "stock_last_reset": now}
                )
                reset_count += 1
            result.append(product)

        if reset_count:
            logger.info("Reset daily stock for %d product(s)", reset_count)
        return result

    @staticmethod
    def reduce_stock(product: Any, quantity: Any) -> Product:
        """
        Return a copy of the product with ``quantity`` units taken off today's stock.

        Untracked products are returned unchanged. Stock never goes below 0.
        """
        product = Product.coerce(product)
        if not product.tracks_stock:
            return product

        available = product.current_stock if product.current_stock is not None else product.daily_stock
        new_stock = max(0, available - max(to_int(quantity, 0), 0))
        return product.model_copy(update={"current_stock": new_stock})

    @staticmethod
    def can_deliver_same_day(store: Any, product: Any, now: Optional[datetime] = None) -> bool:
        """
        Can the product still be fulfilled today?

        False when the store's same-day cutoff has passed, when the product
        is out of stock, or when the product disallows same-day scheduling.
        """
        store = Store.coerce(store)
        product = Product.coerce(product)
        now = _now(now)

        cutoff = hhmm_to_minutes(store.same_day_cutoff_time)
        if cutoff is not None and minutes_of_day(now) > cutoff:
            return False

        if not StockManager.check_daily_stock(product, now):
            return False

        return product.allow_same_day_scheduling


check_daily_stock = StockManager.check_daily_stock
reset_daily_stock = StockManager.reset_daily_stock
reduce_stock = StockManager.reduce_stock
can_deliver_same_day = StockManager.can_deliver_same_day
