"""
Order Creation Service for Storefront Core
==========================================

This module turns a checkout submission into persisted rows. It is the only
place where the pricing, scheduling and stock rules meet the database.

Key Functions:
--------------
- validate_order_data: Collect every problem with a submission as messages
- calculate_order_total: Subtotal + delivery fee, rounded to cents
- build_order_lines: Per-line prices from the pricing engine
- create_order: Validate, re-check the slot, persist, decrement stock

Order Lifecycle:
----------------
1. Customer builds a cart; prices shown come from ``calculate_pricing``
2. Customer picks a slot from ``get_available_slots`` (advisory)
3. ``create_order`` re-validates the slot with ``can_schedule_order``
4. Order, order items and addon rows are inserted and the stock ledger is
   decremented in the same transaction (status: pending)

Line Prices:
------------
Each order item stores ``calculate_pricing(...).total`` rounded to cents as
its price. Addon rows store the undiscounted ``unit price x quantity`` of
each addon with a positive quantity, for reporting.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..inventory import commit_stock_decrement
from ..models import Order, OrderItem, OrderItemAddon
from ..pricing import calculate_pricing
from ..scheduling import DELIVERY, PICKUP, SchedulingManager
from ..schemas.catalog import CartItem
from ..schemas.orders import CreateOrderParams

logger = logging.getLogger(__name__)

REASON_STORE_REQUIRED = "Store configuration is required to schedule an order."


class OrderValidationError(ValueError):
    """Raised when a submission is missing required data."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(f"Invalid order data: {', '.join(errors)}")


class SchedulingUnavailableError(Exception):
    """Raised when the chosen slot no longer passes ``can_schedule_order``."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


def round_money(amount: float) -> float:
    """Round to 2 decimal places for currency."""
    return round(amount, 2)


def _coerce_params(params: Any) -> CreateOrderParams:
    if isinstance(params, CreateOrderParams):
        return params
    return CreateOrderParams.model_validate(params)


def validate_order_data(params: Any) -> List[str]:
    """
    Check a submission for missing data.

    Returns:
        List of human-readable problems; empty when the submission is valid
    """
    params = _coerce_params(params)
    errors: List[str] = []

    if not params.customer_data.name.strip():
        errors.append("Customer name is required")
    if not params.customer_data.phone.strip():
        errors.append("Customer phone is required")

    if not params.items:
        errors.append("At least one item must be added to the order")

    delivery_type = params.order_data.delivery_type.strip().lower()
    if delivery_type not in (DELIVERY, PICKUP):
        errors.append("Delivery type must be 'delivery' or 'pickup'")

    if delivery_type == DELIVERY:
        address = params.address_data
        if address is None:
            errors.append("Address is required for delivery")
        else:
            if not address.street.strip():
                errors.append("Street is required")
            if not address.number.strip():
                errors.append("Number is required")
            if not address.neighborhood.strip():
                errors.append("Neighborhood is required")
            if not address.city.strip():
                errors.append("City is required")

    if not params.order_data.payment_method.strip():
        errors.append("Payment method is required")

    return errors


def build_order_lines(items: Iterable[Any]) -> List[Dict[str, Any]]:
    """
    Price every cart line.

    Returns:
        One dict per line with product_id, quantity, price (rounded line
        total), product_total, addons_total, notes and addon rows
    """
    lines = []
    for raw in items:
        item = raw if isinstance(raw, CartItem) else CartItem.model_validate(raw)
        calculation = calculate_pricing(item.product, item.quantity, item.addons)
        lines.append({
            "product_id": item.product.id,
            "quantity": item.quantity,
            "price": round_money(calculation.total),
            "product_total": calculation.product_total,
            "addons_total": calculation.addons_total,
            "notes": item.notes.strip() or None,
            "addons": [
                {
                    "addon_item_id": addon.id,
                    "price": round_money(addon.price * addon.quantity),
                }
                for addon in item.addons
                if addon.quantity is not None and addon.quantity > 0
            ],
        })
    return lines


def calculate_order_total(items: Iterable[Any], delivery_fee: float = 0.0) -> Dict[str, float]:
    """
    Calculate the order subtotal and total.

    Args:
        items: Cart lines
        delivery_fee: Fee added on top of the subtotal

    Returns:
        Dictionary with subtotal, delivery_fee and total, rounded to cents
    """
    subtotal = 0.0
    for raw in items:
        item = raw if isinstance(raw, CartItem) else CartItem.model_validate(raw)
        subtotal += calculate_pricing(item.product, item.quantity, item.addons).total

    delivery_fee = delivery_fee or 0.0
    return {
        "subtotal": round_money(subtotal),
        "delivery_fee": round_money(delivery_fee),
        "total": round_money(subtotal + delivery_fee),
    }


def create_order(
    db: Session,
    params: Any,
    store: Any = None,
    now: Optional[datetime] = None,
) -> Order:
    """
    Validate and persist an order with its items and addons.

    When the order is scheduled, the chosen slot is re-validated against
    ``store`` first; a scheduled order without a store is refused. Stock for tracked products is decremented in the
    same transaction as the insert.

    Args:
        db: Database session
        params: CreateOrderParams (or an equivalent dict)
        store: Store configuration used to re-validate the slot
        now: Reference local time (defaults to the wall clock)

    Returns:
        The created Order

    Raises:
        OrderValidationError: If required data is missing
        SchedulingUnavailableError: If the chosen slot is no longer valid
        OutOfStockError: If a tracked product sold out in the meantime
    """
    params = _coerce_params(params)
    now = now or datetime.now()

    errors = validate_order_data(params)
    if errors:
        raise OrderValidationError(errors)

    order_data = params.order_data
    delivery_type = order_data.delivery_type.strip().lower()
    scheduled_for = order_data.scheduled_for

    if scheduled_for is not None:
        if store is None:
            raise SchedulingUnavailableError(REASON_STORE_REQUIRED)
        decision = SchedulingManager.can_schedule_order(
            store,
            params.items,
            delivery_type,
            scheduled_for.date(),
            scheduled_for.strftime("%H:%M"),
            now=now,
        )
        if not decision.can_schedule:
            raise SchedulingUnavailableError(decision.reason)

    totals = calculate_order_total(params.items, params.delivery_fee)
    lines = build_order_lines(params.items)
    address = params.address_data if delivery_type == DELIVERY else None

    try:
        order = Order(
            store_id=order_data.store_id,
            status="pending",
            customer_name=params.customer_data.name.strip(),
            customer_phone=params.customer_data.phone.strip(),
            customer_email=params.customer_data.email or None,
            delivery_type=delivery_type,
            payment_method=order_data.payment_method.strip(),
            subtotal=totals["subtotal"],
            delivery_fee=totals["delivery_fee"],
            total=totals["total"],
            notes=order_data.notes or None,
            scheduled_for=scheduled_for,
            street=address.street if address else None,
            number=address.number if address else None,
            complement=address.complement if address else None,
            neighborhood=address.neighborhood if address else None,
            city=address.city if address else None,
            state=address.state if address else None,
            zip=address.zip_code if address else None,
            address=address.one_line() if address else None,
        )
        db.add(order)
        db.flush()  # populate order.id

        for line in lines:
            order_item = OrderItem(
                order_id=order.id,
                product_id=line["product_id"],
                quantity=line["quantity"],
                price=line["price"],
                notes=line["notes"],
            )
            for addon in line["addons"]:
                order_item.addons.append(
                    OrderItemAddon(addon_item_id=addon["addon_item_id"], price=addon["price"])
                )
            db.add(order_item)

        commit_stock_decrement(
            db, [(line["product_id"], line["quantity"]) for line in lines], now=now
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Created order %s for store %s: %d line(s), total %.2f",
        order.id, order.store_id, len(lines), order.total,
    )
    return order
