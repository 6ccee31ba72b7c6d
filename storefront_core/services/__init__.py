"""
Services Package for Storefront Core
====================================

Services sit on the write path and receive their dependencies (database
sessions, store configuration, the reference time) from the caller.

Available Services:
-------------------
- **order**: Order validation, totals and persistence

Usage:
------
    from storefront_core.services.order import create_order, calculate_order_total
"""

from . import order

__all__ = ["order"]
