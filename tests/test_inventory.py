"""
Tests for the authoritative stock ledger in the products table.
"""
from datetime import timedelta

import pytest

from storefront_core.inventory import (
    OutOfStockError,
    commit_stock_decrement,
    reset_daily_stock_in_db,
    reset_product_stock,
)
from storefront_core.models import Product as ProductRecord

from conftest import NOW


def _row(db, product_id):
    return db.query(ProductRecord).filter_by(id=product_id).one()


class TestCommitStockDecrement:
    def test_decrement_success(self, db):
        remaining = commit_stock_decrement(db, [("cake", 2)], now=NOW)
        db.commit()

        assert remaining == {"cake": 1}
        assert _row(db, "cake").current_stock == 1

    def test_decrement_fail(self, db):
        with pytest.raises(OutOfStockError) as exc_info:
            commit_stock_decrement(db, [("cake", 4)], now=NOW)
        db.rollback()

        assert exc_info.value.product_id == "cake"
        assert exc_info.value.requested == 4
        assert exc_info.value.available == 3
        assert _row(db, "cake").current_stock == 3

    def test_exact_remaining_stock_can_be_sold(self, db):
        assert commit_stock_decrement(db, [("cake", 3)], now=NOW) == {"cake": 0}

    def test_lines_for_same_product_are_summed(self, db):
        with pytest.raises(OutOfStockError):
            commit_stock_decrement(db, [("cake", 2), ("cake", 2)], now=NOW)

    def test_untracked_and_unknown_products_skipped(self, db):
        remaining = commit_stock_decrement(db, [("soda", 100), ("ghost", 1)], now=NOW)
        assert remaining == {}
        assert _row(db, "soda").current_stock is None

    def test_non_positive_quantities_ignored(self, db):
        assert commit_stock_decrement(db, [("cake", 0), ("cake", -2), (None, 1)], now=NOW) == {}
        assert _row(db, "cake").current_stock == 3

    def test_stale_row_is_reset_before_decrement(self, db):
        tomorrow = NOW + timedelta(days=1)

        remaining = commit_stock_decrement(db, [("cake", 4)], now=tomorrow)
        db.commit()

        row = _row(db, "cake")
        assert remaining == {"cake": 1}
        assert row.current_stock == 1
        assert row.stock_last_reset.date() == tomorrow.date()

    def test_missing_current_stock_uses_daily_stock(self, db):
        _row(db, "cake").current_stock = None
        db.commit()

        assert commit_stock_decrement(db, [("cake", 5)], now=NOW) == {"cake": 0}

    def test_second_checkout_cannot_oversell(self, db):
        commit_stock_decrement(db, [("cake", 3)], now=NOW)
        db.commit()

        with pytest.raises(OutOfStockError) as exc_info:
            commit_stock_decrement(db, [("cake", 1)], now=NOW)
        assert exc_info.value.available == 0


class TestDailyReset:
    def test_no_reset_twice_in_one_day(self, db):
        assert reset_daily_stock_in_db(db, NOW) == 0
        assert _row(db, "cake").current_stock == 3

    def test_reset_on_new_day(self, db):
        tomorrow = NOW + timedelta(days=1)

        assert reset_daily_stock_in_db(db, tomorrow) == 1
        assert reset_daily_stock_in_db(db, tomorrow + timedelta(hours=2)) == 0

        row = _row(db, "cake")
        assert row.current_stock == 5
        assert row.stock_last_reset == tomorrow

    def test_never_reset_rows_are_reset(self, db):
        _row(db, "cake").stock_last_reset = None
        db.commit()

        assert reset_daily_stock_in_db(db, NOW) == 1
        assert _row(db, "cake").current_stock == 5


class TestManualReset:
    def test_refills_regardless_of_last_reset(self, db):
        assert reset_product_stock(db, "cake", NOW) is True
        assert _row(db, "cake").current_stock == 5

    def test_untracked_or_unknown(self, db):
        assert reset_product_stock(db, "soda", NOW) is False
        assert reset_product_stock(db, "ghost", NOW) is False
