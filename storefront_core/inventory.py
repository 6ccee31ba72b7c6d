"""
Authoritative stock ledger operations.

The stock checks in ``stock`` and ``stock_cache`` are advisory pre-checks.
The real decrement happens here, at order commit, against the ``products``
table, using conditional UPDATE statements so two concurrent checkouts can
never sell the same last unit:

    UPDATE products
       SET current_stock = COALESCE(current_stock, daily_stock) - :qty
     WHERE id = :id AND COALESCE(current_stock, daily_stock) >= :qty

A zero rowcount means another order got there first and the caller's
transaction must be rolled back.

The daily reset is likewise applied with a conditional UPDATE keyed on
``stock_last_reset``, so running it from several workers resets each row at
most once per day.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Tuple

from sqlalchemy import and_, func, or_, select, update
from sqlalchemy.orm import Session

from .models import Product as ProductRecord

logger = logging.getLogger(__name__)


class OutOfStockError(Exception):
    """Raised when there is not enough stock to fulfill an order line."""

    def __init__(self, product_id: str, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Not enough stock for {product_id}: requested {requested}, available {available}"
        )


def _start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def _stale_reset_clause(now: datetime):
    return or_(
        ProductRecord.stock_last_reset.is_(None),
        ProductRecord.stock_last_reset < _start_of_day(now),
    )


def _apply_daily_reset(db: Session, now: datetime, product_id: Optional[str] = None) -> int:
    """Reset rows not reset yet today. Does not commit."""
    conditions = [ProductRecord.daily_stock.is_not(None), _stale_reset_clause(now)]
    if product_id is not None:
        conditions.append(ProductRecord.id == product_id)

    result = db.execute(
        update(ProductRecord)
        .where(and_(*conditions))
        .values(current_stock=ProductRecord.daily_stock, stock_last_reset=now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


def reset_daily_stock_in_db(db: Session, now: Optional[datetime] = None) -> int:
    """
    Reset today's stock for every tracked product not yet reset today.

    Returns:
        Number of products reset
    """
    now = now or datetime.now()
    count = _apply_daily_reset(db, now)
    db.commit()
    db.expire_all()
    if count:
        logger.info("Daily stock reset applied to %d product(s)", count)
    return count


def reset_product_stock(db: Session, product_id: str, now: Optional[datetime] = None) -> bool:
    """
    Manually refill one product's stock to its daily amount.

    Unlike the daily reset this ignores ``stock_last_reset`` and always
    refills, which is what the "reset stock" action in the admin panel does.

    Returns:
        True if a tracked product was reset
    """
    now = now or datetime.now()
    result = db.execute(
        update(ProductRecord)
        .where(ProductRecord.id == product_id, ProductRecord.daily_stock.is_not(None))
        .values(current_stock=ProductRecord.daily_stock, stock_last_reset=now)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.expire_all()
    reset = (result.rowcount or 0) > 0
    if reset:
        logger.info("Manual stock reset for product %s", product_id)
    return reset


def commit_stock_decrement(
    db: Session,
    lines: Iterable[Tuple[Any, int]],
    now: Optional[datetime] = None,
) -> Dict[str, int]:
    """
    Decrement the ledger for each (product_id, quantity) line.

    Lines for the same product are summed first. Products that do not exist
    or do not track stock are skipped. Rows that have not been reset yet
    today are reset before decrementing.

    The caller owns the transaction: nothing is committed here, and on
    OutOfStockError the caller must roll back.

    Returns:
        Mapping of product id to remaining stock, for tracked products only

    Raises:
        OutOfStockError: If any tracked product lacks enough stock
    """
    now = now or datetime.now()

    requested: Dict[str, int] = defaultdict(int)
    for product_id, quantity in lines:
        if product_id is None or not quantity or quantity <= 0:
            continue
        requested[str(product_id)] += int(quantity)

    remaining: Dict[str, int] = {}
    for product_id, quantity in requested.items():
        daily_stock = db.execute(
            select(ProductRecord.daily_stock).where(ProductRecord.id == product_id)
        ).scalar_one_or_none()
        if daily_stock is None:
            # Unknown product or no stock tracking
            continue

        _apply_daily_reset(db, now, product_id=product_id)

        available_expr = func.coalesce(ProductRecord.current_stock, ProductRecord.daily_stock)
        result = db.execute(
            update(ProductRecord)
            .where(ProductRecord.id == product_id, available_expr >= quantity)
            .values(current_stock=available_expr - quantity)
            .execution_options(synchronize_session=False)
        )

        left = db.execute(select(available_expr).where(ProductRecord.id == product_id)).scalar_one()
        if result.rowcount != 1:
            raise OutOfStockError(product_id, quantity, left)

        remaining[product_id] = left

    db.expire_all()
    logger.debug("Stock decremented for %d product(s)", len(remaining))
    return remaining
