"""
Live Stock Cache - Session-Local View of Product Stock.

Keeps an in-memory copy of the products a storefront session is showing and
answers stock questions (badges, "only 3 left", add-to-cart checks) without a
round trip to the product backend.

Features:
- Full replace whenever the caller's product list changes (``sync``)
- Reset sweep at the daily boundary: once on every sync and then on a
  configurable cadence (default: hourly) from a background task
- Injectable clock so tests can cross midnight deterministically
- Per-product isolation: one bad row never aborts the sweep for the others
- Stock alert queries: products running low (at most 20% of daily stock
  left) and products sold out for today

The cache is advisory. It is local to one session and is not a shared
mutation authority; the authoritative decrement happens at order commit in
the backing store (``storefront_core.inventory.commit_stock_decrement``).

Usage:
    from storefront_core.stock_cache import StockCache

    cache = StockCache(products)
    await cache.start()          # background reset checks
    cache.check_availability("p1", 2)
    await cache.stop()           # on session teardown
"""

import asyncio
import logging
import math
import threading
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Union

from . import config
from .clock import Clock, resolve_clock
from .schemas._coerce import to_int
from .schemas.catalog import Product
from .stock import was_reset_on

logger = logging.getLogger(__name__)

UNLIMITED = math.inf

# Share of daily_stock at or below which a product counts as running low
LOW_STOCK_RATIO = 0.2


class StockCache:
    """
    In-memory stock cache keyed by product id.

    Mutations (sync, sweep, reduce) are serialized by a lock so the
    background sweep and request handlers on other threads do not interleave.
    """

    def __init__(
        self,
        products: Optional[Iterable[Any]] = None,
        clock: Optional[Clock] = None,
        check_interval_seconds: Optional[float] = None,
    ):
        self._clock = resolve_clock(clock)
        if check_interval_seconds is None:
            check_interval_seconds = config.STOCK_RESET_CHECK_SECONDS
        if check_interval_seconds <= 0:
            raise ValueError(f"check_interval_seconds must be positive, got {check_interval_seconds}")
        self._check_interval = check_interval_seconds
        self._products: Dict[str, Product] = {}
        self._lock = threading.Lock()
        self._sweep_task: asyncio.Task | None = None
        self._last_sweep: datetime | None = None

        if products is not None:
            self.sync(products)

    @property
    def products(self) -> List[Product]:
        """Snapshot of the cached products."""
        with self._lock:
            return list(self._products.values())

    @property
    def last_sweep(self) -> datetime | None:
        return self._last_sweep

    @property
    def is_running(self) -> bool:
        return self._sweep_task is not None and not self._sweep_task.done()

    def get(self, product_id: Any) -> Optional[Product]:
        if product_id is None:
            return None
        with self._lock:
            return self._products.get(str(product_id))

    # =========================================================================
    # Synchronization and Reset Sweep
    # =========================================================================

    def sync(self, products: Optional[Iterable[Any]]) -> int:
        """
        Replace the cache with ``products`` and run a reset sweep.

        Entries that cannot be read as a product, or that have no id, are
        skipped.

        Returns:
            Number of products now cached
        """
        fresh: Dict[str, Product] = {}
        skipped = 0
        for raw in products or []:
            if raw is None:
                skipped += 1
                continue
            product = Product.coerce(raw)
            if not product.id:
                skipped += 1
                continue
            fresh[product.id] = product

        with self._lock:
            self._products = fresh

        if skipped:
            logger.warning("Skipped %d malformed product(s) while syncing stock cache", skipped)
        logger.debug("Stock cache synced with %d product(s)", len(fresh))

        self.run_reset_sweep()
        return len(fresh)

    def run_reset_sweep(self) -> int:
        """
        Reset today's stock for every tracked product not yet reset today.

        Returns:
            Number of products reset
        """
        now = self._clock.now()
        reset_ids = []

        with self._lock:
            for product_id, product in list(self._products.items()):
                try:
                    if product.tracks_stock and not was_reset_on(product, now):
                        self._products[product_id] = product.model_copy(
                            update={"current_stock": product.daily_stock, "stock_last_reset": now}
                        )
                        reset_ids.append(product_id)
                except Exception as e:
                    logger.error("Failed to reset stock for product %s: %s", product_id, e)
            self._last_sweep = now

        if reset_ids:
            logger.info("Daily stock reset for %d product(s) at %s", len(reset_ids), now.isoformat())
        return len(reset_ids)

    # =========================================================================
    # Queries
    # =========================================================================

    def get_available_stock(self, product_id: Any) -> Union[int, float]:
        """Units left today, or ``math.inf`` for untracked or unknown products."""
        product = self.get(product_id)
        if product is None or not product.tracks_stock:
            return UNLIMITED
        return product.current_stock or 0

    def check_availability(self, product_id: Any, requested_quantity: Any) -> bool:
        """
        Can ``requested_quantity`` units be added to the cart?

        Unknown products are reported unavailable; untracked products always
        are available.
        """
        product = self.get(product_id)
        if product is None:
            return False
        if not product.tracks_stock:
            return True
        return (product.current_stock or 0) >= to_int(requested_quantity, 0)

    def low_stock_ids(self, ratio: float = LOW_STOCK_RATIO) -> List[str]:
        """
        Tracked products still in stock but at or below ``ratio`` of their daily stock.

        Products with a daily stock of 0 are never reported here.
        """
        with self._lock:
            return [
                product.id
                for product in self._products.values()
                if product.daily_stock
                and 0 < (product.current_stock or 0) <= product.daily_stock * ratio
            ]

    def out_of_stock_ids(self) -> List[str]:
        """Tracked products with a positive daily stock and nothing left today."""
        with self._lock:
            return [
                product.id
                for product in self._products.values()
                if product.daily_stock and (product.current_stock or 0) <= 0
            ]

    # =========================================================================
    # Mutation
    # =========================================================================

    def reduce_stock(self, product_id: Any, quantity: Any) -> None:
        """Take ``quantity`` units off the cached stock, floored at 0."""
        if product_id is None:
            return
        amount = max(to_int(quantity, 0), 0)
        with self._lock:
            product = self._products.get(str(product_id))
            if product is None or not product.tracks_stock:
                return
            self._products[product.id] = product.model_copy(
                update={"current_stock": max(0, (product.current_stock or 0) - amount)}
            )

    # =========================================================================
    # Background Sweep Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Start the background task that re-checks the reset boundary."""
        if self.is_running:
            return
        self.run_reset_sweep()
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        logger.info("Started stock reset task (every %.0f seconds)", self._check_interval)

    async def stop(self) -> None:
        """Stop the background task. Safe to call when not running."""
        if self._sweep_task:
            self._sweep_task.cancel()
            try:
                await self._sweep_task
            except asyncio.CancelledError:
                pass
            self._sweep_task = None
            logger.info("Stopped stock reset task")

    async def _sweep_loop(self) -> None:
        while True:
            try:
                await self._clock.sleep(self._check_interval)
                self.run_reset_sweep()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Error in stock reset sweep: %s", e)
