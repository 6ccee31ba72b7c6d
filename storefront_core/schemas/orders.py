"""
Order Input Schemas
===================

Pydantic models describing what the checkout flow hands to
``services.order.create_order``. Fields default to empty values rather than
being required so that ``validate_order_data`` can report every missing
field at once, as a list of readable messages, instead of failing on the
first one.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ._coerce import to_float, to_local_datetime, to_optional_str
from .catalog import CartItem


def _blank_if_none(v):
    if v is None:
        return ""
    return v if isinstance(v, str) else str(v)


class CustomerData(BaseModel):
    name: str = ""
    phone: str = ""
    email: Optional[str] = None

    @field_validator("name", "phone", mode="before")
    @classmethod
    def _coerce_blank(cls, v):
        return _blank_if_none(v)


class AddressData(BaseModel):
    """Delivery address. Only required when the order is delivered."""

    zip_code: str = ""
    street: str = ""
    number: str = ""
    complement: Optional[str] = None
    neighborhood: str = ""
    city: str = ""
    state: str = ""
    reference_point: Optional[str] = None

    @field_validator(
        "zip_code", "street", "number", "neighborhood", "city", "state", mode="before"
    )
    @classmethod
    def _coerce_blank(cls, v):
        return _blank_if_none(v)

    def one_line(self) -> str:
        """Single-line rendering stored on the order for legacy consumers."""
        complement = f", {self.complement}" if self.complement else ""
        return f"{self.street}, {self.number}{complement} - {self.neighborhood}"


class OrderData(BaseModel):
    """
    Order-level choices.

    Attributes:
        delivery_type: "delivery" or "pickup"
        payment_method: "cash", "credit_card" or "pix"
        notes: Free-text notes for the whole order
        scheduled_for: Chosen slot (local time), None for "as soon as possible"
        store_id: Store the order belongs to
    """

    delivery_type: str = "delivery"
    payment_method: str = ""
    notes: Optional[str] = None
    scheduled_for: Optional[datetime] = None
    store_id: Optional[str] = None

    @field_validator("delivery_type", "payment_method", mode="before")
    @classmethod
    def _coerce_blank(cls, v):
        return _blank_if_none(v)

    @field_validator("scheduled_for", mode="before")
    @classmethod
    def _coerce_scheduled_for(cls, v):
        return to_local_datetime(v)

    @field_validator("store_id", mode="before")
    @classmethod
    def _coerce_store_id(cls, v):
        return to_optional_str(v)


class CreateOrderParams(BaseModel):
    """Everything needed to create an order."""

    customer_data: CustomerData = Field(default_factory=CustomerData)
    order_data: OrderData = Field(default_factory=OrderData)
    address_data: Optional[AddressData] = None
    items: List[CartItem] = []
    delivery_fee: float = 0.0

    @field_validator("delivery_fee", mode="before")
    @classmethod
    def _coerce_fee(cls, v):
        return max(to_float(v, 0.0), 0.0)
