"""
Tests for cart line pricing, including included-addon thresholds.
"""
import pytest

from storefront_core.pricing import PricingCalculator, calculate_pricing
from storefront_core.schemas import Product, ProductAddon


class TestDefaultPricing:
    """Products without an included-addon threshold."""

    def test_product_and_addons_multiplied_by_quantity(self):
        product = {"id": "p1", "price": 12.0}
        result = calculate_pricing(product, 2, [{"price": 5, "quantity": 3}])

        assert result.product_total == 24.0
        assert result.addons_total == 30.0
        assert result.total == 54.0

    def test_no_addons(self):
        result = calculate_pricing({"price": 9.5}, 3, [])
        assert result.product_total == 28.5
        assert result.addons_total == 0
        assert result.total == 28.5

    def test_sale_price_overrides_price(self):
        result = calculate_pricing({"price": 20.0, "sale_price": 15.0}, 2, [])
        assert result.product_total == 30.0

    def test_zero_sale_price_falls_back_to_price(self):
        result = calculate_pricing({"price": 20.0, "sale_price": 0}, 1, [])
        assert result.product_total == 20.0

    def test_addon_without_quantity_counts_once(self):
        result = calculate_pricing({"price": 10.0}, 2, [{"price": 3}])
        assert result.addons_total == 6.0

    def test_threshold_with_no_addons_uses_default_branch(self):
        result = calculate_pricing({"price": 20.0, "max_included_quantity": 3}, 2, [])
        assert result.product_total == 40.0
        assert result.addons_total == 0

    @pytest.mark.parametrize(
        "price,quantity,addons",
        [
            (10.0, 1, [{"price": 2.5, "quantity": 2}]),
            (7.25, 4, [{"price": 1.0}, {"price": 3.5, "quantity": 3}]),
            (0.0, 2, [{"price": 4.0, "quantity": 1}]),
        ],
    )
    def test_total_matches_formula_and_is_stable(self, price, quantity, addons):
        product = {"price": price}
        expected = price * quantity + sum(
            a["price"] * a.get("quantity", 1) for a in addons
        ) * quantity

        first = calculate_pricing(product, quantity, addons)
        second = calculate_pricing(product, quantity, addons)

        assert first.total == expected
        assert first == second


class TestIncludedQuantityPricing:
    """Products with max_included_quantity and addons."""

    def test_under_threshold_product_is_free(self):
        product = {"price": 20.0, "max_included_quantity": 3}
        result = calculate_pricing(product, 1, [{"price": 4, "quantity": 2}])

        assert result.product_total == 0
        assert result.addons_total == 8.0
        assert result.total == 8.0

    def test_under_threshold_multiplies_addons_by_quantity(self):
        product = {"price": 20.0, "max_included_quantity": 3}
        result = calculate_pricing(product, 2, [{"price": 4, "quantity": 2}])
        assert result.addons_total == 16.0

    def test_exact_threshold_addons_included(self):
        product = {"price": 20.0, "max_included_quantity": 3}
        result = calculate_pricing(product, 1, [{"price": 4, "quantity": 3}])

        assert result.product_total == 20.0
        assert result.addons_total == 0
        assert result.total == 20.0

    def test_over_threshold_bills_most_expensive_units(self):
        product = {"price": 30.0, "max_included_quantity": 2}
        addons = [{"price": 6, "quantity": 2}, {"price": 10, "quantity": 1}]

        result = calculate_pricing(product, 1, addons)

        assert result.product_total == 30.0
        assert result.addons_total == 10.0
        assert result.total == 40.0

    def test_excess_spans_several_addons(self):
        product = {"price": 30.0, "max_included_quantity": 1}
        addons = [
            {"price": 2, "quantity": 3},
            {"price": 8, "quantity": 1},
            {"price": 5, "quantity": 1},
        ]
        # 5 units, 4 excess: 8 + 5 + 2 + 2
        result = calculate_pricing(product, 1, addons)
        assert result.addons_total == 17.0

    def test_excess_multiplied_by_quantity(self):
        product = {"price": 30.0, "max_included_quantity": 2}
        addons = [{"price": 10, "quantity": 1}, {"price": 6, "quantity": 2}]

        result = calculate_pricing(product, 3, addons)

        assert result.product_total == 90.0
        assert result.addons_total == 30.0

    def test_zero_quantity_addons_are_not_counted(self):
        product = {"price": 20.0, "max_included_quantity": 2}
        addons = [{"price": 4, "quantity": 2}, {"price": 50, "quantity": 0}]

        result = calculate_pricing(product, 1, addons)

        # 2 billable units == threshold: product price only
        assert result.product_total == 20.0
        assert result.addons_total == 0

    def test_only_non_positive_addons_use_default_branch(self):
        product = {"price": 20.0, "max_included_quantity": 2}
        result = calculate_pricing(product, 1, [{"price": 4, "quantity": -1}])
        assert result.product_total == 20.0
        assert result.addons_total == 0

    def test_excess_unit_price_is_not_used(self):
        product = {"price": 20.0, "max_included_quantity": 1, "excess_unit_price": 99.0}
        result = calculate_pricing(product, 1, [{"price": 3, "quantity": 2}])
        assert result.addons_total == 3.0


class TestMalformedInput:
    """Malformed values are coerced instead of raising."""

    def test_malformed_quantity_is_zero(self):
        result = calculate_pricing({"price": 10.0}, "lots", [{"price": 2}])
        assert result.total == 0

    def test_malformed_prices_are_zero(self):
        result = calculate_pricing({"price": "abc"}, 2, [{"price": None, "quantity": 1}])
        assert result.product_total == 0
        assert result.addons_total == 0

    def test_numeric_strings_are_accepted(self):
        result = calculate_pricing({"price": "12,50"}, "2", [{"price": "1.5", "quantity": "2"}])
        assert result.product_total == 25.0
        assert result.addons_total == 6.0

    def test_missing_product(self):
        result = calculate_pricing(None, 1, None)
        assert result.total == 0

    def test_non_mapping_addons_are_ignored(self):
        result = calculate_pricing({"price": 5.0}, 1, ["cheese", 3, None])
        assert result.total == 5.0

    def test_accepts_models(self):
        product = Product(id="p1", price=10.0, max_included_quantity=1)
        addons = [ProductAddon(price=4.0, quantity=1)]
        assert calculate_pricing(product, 1, addons).total == 10.0


class TestLegacyFacade:
    def test_calculate_product_price_keys(self):
        result = PricingCalculator.calculate_product_price(
            {"price": 10.0}, 2, [{"price": 1.0, "quantity": 1}]
        )
        assert result == {"total_price": 22.0, "product_price": 20.0, "addons_price": 2.0}


class TestAddonRows:
    """Addons read from ORM rows price the same as dict addons."""

    class AddonRow:
        def __init__(self, id, price, quantity=None):
            self.id = id
            self.name = f"Addon {id}"
            self.price = price
            self.quantity = quantity

    def test_row_addons_are_billed(self):
        rows = [self.AddonRow("cheese", 5.0, 3)]
        assert calculate_pricing({"price": 12.0}, 2, rows).addons_total == 30.0

    def test_rows_and_dicts_price_alike(self):
        product = {"price": 30.0, "max_included_quantity": 2}
        rows = [self.AddonRow("a", 10.0, 1), self.AddonRow("b", 6.0, 2)]
        dicts = [{"price": 10.0, "quantity": 1}, {"price": 6.0, "quantity": 2}]

        assert calculate_pricing(product, 1, rows) == calculate_pricing(product, 1, dicts)

    def test_row_without_quantity_counts_once(self):
        assert calculate_pricing({"price": 10.0}, 1, [self.AddonRow("a", 2.5)]).total == 12.5
