"""
Schemas Package for Storefront Core
===================================

Pydantic models for the data the pricing, stock and scheduling engine
consumes and returns. Rows from the product/store backend are validated
once at this boundary; loosely typed or missing fields are coerced to
documented defaults so the engine itself never has to re-check them.

Schema Organization:
--------------------
- **catalog.py**: Product, ProductAddon, CartItem, PricingCalculation
- **stores.py**: Store, DaySchedule, SpecialDate, SchedulingOption, ScheduleDecision
- **orders.py**: Order creation input (customer, address, order choices)

Usage:
------
    from storefront_core.schemas import Product, Store, CartItem
"""

from .catalog import CartItem, PricingCalculation, Product, ProductAddon
from .orders import AddressData, CreateOrderParams, CustomerData, OrderData
from .stores import (
    DaySchedule,
    DeliveryType,
    ScheduleDecision,
    SchedulingOption,
    SpecialDate,
    Store,
)

__all__ = [
    "AddressData",
    "CartItem",
    "CreateOrderParams",
    "CustomerData",
    "DaySchedule",
    "DeliveryType",
    "OrderData",
    "PricingCalculation",
    "Product",
    "ProductAddon",
    "ScheduleDecision",
    "SchedulingOption",
    "SpecialDate",
    "Store",
]
