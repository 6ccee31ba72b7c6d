"""
Tests for lenient schema coercion at the data boundary.
"""
from datetime import date, datetime

from storefront_core.schemas import CartItem, CreateOrderParams, Product, ProductAddon, Store
from storefront_core.schemas._coerce import to_bool, to_float, to_local_datetime


class TestCoercionHelpers:
    def test_to_float(self):
        assert to_float("12,5") == 12.5
        assert to_float(" 3 ") == 3.0
        assert to_float("nan") == 0.0
        assert to_float("inf", None) is None
        assert to_float(True) == 0.0
        assert to_float([], 1.0) == 1.0

    def test_to_bool(self):
        assert to_bool("yes", False) is True
        assert to_bool("0", True) is False
        assert to_bool("maybe", True) is True
        assert to_bool(None, False) is False

    def test_to_local_datetime(self):
        assert to_local_datetime("2024-05-15T10:00:00") == datetime(2024, 5, 15, 10, 0)
        assert to_local_datetime("garbage") is None
        assert to_local_datetime("") is None

        aware = to_local_datetime("2024-05-15T10:00:00Z")
        assert aware is not None
        assert aware.tzinfo is None


class TestProduct:
    def test_defaults_for_missing_fields(self):
        product = Product.coerce({"id": 7})

        assert product.id == "7"
        assert product.price == 0.0
        assert product.tracks_stock is False
        assert product.allow_same_day_scheduling is True

    def test_malformed_fields(self):
        product = Product.coerce({
            "price": "-3",
            "sale_price": "abc",
            "daily_stock": "-1",
            "current_stock": "4.0",
            "stock_last_reset": "not a date",
            "allow_same_day_scheduling": "false",
        })

        assert product.price == 0.0
        assert product.sale_price is None
        assert product.daily_stock is None
        assert product.current_stock == 4
        assert product.stock_last_reset is None
        assert product.allow_same_day_scheduling is False

    def test_from_orm_like_object(self):
        class Row:
            id = "p1"
            price = 9.0
            daily_stock = 3

        product = Product.coerce(Row())
        assert (product.id, product.price, product.daily_stock) == ("p1", 9.0, 3)

    def test_none_becomes_empty_product(self):
        assert Product.coerce(None) == Product()

    def test_unit_price(self):
        assert Product(price=10.0, sale_price=8.0).unit_price == 8.0
        assert Product(price=10.0).unit_price == 10.0


class TestCartItem:
    def test_quantity_coercion(self):
        assert CartItem(product={"id": "p"}).quantity == 1
        assert CartItem(product={"id": "p"}, quantity="x").quantity == 0
        assert CartItem(product={"id": "p"}, quantity=-2).quantity == 0

    def test_addons_filtered(self):
        item = CartItem(product={"id": "p"}, addons=[{"price": 1}, "cheese", None, ProductAddon(price=2)])
        assert [a.price for a in item.addons] == [1.0, 2.0]

    def test_addon_rows_accepted(self):
        class AddonRow:
            id = "bacon"
            name = "Bacon"
            price = 4.0
            quantity = 2

        item = CartItem(product={"id": "p"}, addons=[AddonRow(), 7])

        assert [(a.id, a.price, a.quantity) for a in item.addons] == [("bacon", 4.0, 2)]

    def test_addon_units(self):
        assert ProductAddon(price=1).units == 1
        assert ProductAddon(price=1, quantity=3).units == 3
        assert ProductAddon(price=1, quantity=-1).units == 0


class TestStore:
    def test_schedule_keys_normalized(self):
        store = Store.coerce({
            "business_hours": {
                "Monday": {"open": "9:00", "close": "18:00"},
                "0": {"open": "10:00", "close": "14:00"},
                "tuesday": "closed",
            },
        })

        assert store.business_hours["monday"].open == "09:00"
        assert store.business_hours["sunday"].close == "14:00"
        assert "tuesday" not in store.business_hours

    def test_channel_schedule_enabled_flag(self):
        store = Store.coerce({"delivery_schedule": {
            "monday": {"start": "11:00", "end": "14:00", "enabled": "true"},
            "tuesday": {"start": "11:00", "end": "14:00"},
        }})

        assert store.delivery_schedule["monday"].enabled is True
        assert store.delivery_schedule["tuesday"].enabled is None
        assert store.delivery_schedule["monday"].window_start == "11:00"

    def test_malformed_cutoff_is_unset(self):
        store = Store.coerce({"same_day_cutoff_time": "25:00", "pickup_cutoff_time": "15:30"})

        assert store.same_day_cutoff_time is None
        assert store.cutoff_for("pickup") == "15:30"
        assert store.cutoff_for("delivery") is None

    def test_special_dates(self):
        store = Store.coerce({"special_dates": [
            {"date": "2024-12-25T00:00:00", "closed": True, "reason": "Christmas"},
            {"date": "2024-12-31", "special_hours": {"open": "08:00", "close": "12:00"}},
            {"date": "not a date"},
            "junk",
        ]})

        assert len(store.special_dates) == 2
        christmas = store.special_date_for(date(2024, 12, 25))
        assert christmas.closed is True
        assert christmas.description == "Christmas"
        assert store.special_date_for(date(2024, 12, 31)).open == "08:00"
        assert store.special_date_for(date(2024, 1, 1)) is None

    def test_scheduling_off_by_default(self):
        assert Store.coerce({}).allow_scheduling is False
        assert Store.coerce(None).allow_scheduling is False


class TestCreateOrderParams:
    def test_defaults(self):
        params = CreateOrderParams.model_validate({})

        assert params.customer_data.name == ""
        assert params.order_data.delivery_type == "delivery"
        assert params.address_data is None
        assert params.items == []
        assert params.delivery_fee == 0.0

    def test_negative_fee_clamped(self):
        assert CreateOrderParams.model_validate({"delivery_fee": -5}).delivery_fee == 0.0

    def test_scheduled_for_parsed(self):
        params = CreateOrderParams.model_validate({"order_data": {"scheduled_for": "2024-05-16T12:30:00"}})
        assert params.order_data.scheduled_for == datetime(2024, 5, 16, 12, 30)
