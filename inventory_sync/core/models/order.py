"""
OrderRecord model: read-only order data owned by the storefront ordering subsystem.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class OrderItem(_CamelModel):
    name: str = ""
    quantity: int = 0
    price: float = 0.0


class ShippingAddress(_CamelModel):
    address: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""

    @field_validator("pincode", mode="before")
    @classmethod
    def pincode_as_text(cls, v):
        return "" if v is None else str(v)

    def one_line(self) -> str:
        return f"{self.address}, {self.city}, {self.state} - {self.pincode}"


class OrderRecord(_CamelModel):
    """
    One order as appended to the order log by the checkout flow.

    Timestamps without an offset are taken as UTC, matching the ISO strings
    the storefront writes.
    """

    order_id: str = Field(..., min_length=1)
    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    items: list[OrderItem] = Field(default_factory=list)
    total_amount: float = 0.0
    payment_id: str = ""
    payment_status: str = "pending"
    order_status: str = "processing"
    shipping_address: ShippingAddress | None = None
    tracking_number: str = ""
    estimated_delivery: str = ""
    notes: str = ""
    created_at: datetime | None = None
    order_date: datetime | None = None

    class Config:
        json_schema_extra = {
            "example": {
                "orderId": "NJ1700000000000",
                "customerName": "Asha Verma",
                "customerEmail": "asha@example.com",
                "totalAmount": 2500,
                "items": [{"name": "Pearl Drop Earrings", "quantity": 1, "price": 2500}],
                "shippingAddress": {"address": "12 MG Road", "city": "Pune", "state": "Maharashtra", "pincode": "411001"},
                "paymentStatus": "completed",
                "orderStatus": "shipped",
                "createdAt": "2025-03-01T10:15:00.000Z",
            }
        }

    @field_validator("created_at", "order_date")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @field_validator(
        "customer_name", "customer_email", "customer_phone", "payment_id",
        "tracking_number", "estimated_delivery", "notes", mode="before",
    )
    @classmethod
    def none_as_empty(cls, v):
        return "" if v is None else v

    @field_validator("payment_status", mode="before")
    @classmethod
    def default_payment_status(cls, v):
        return v or "pending"

    @field_validator("order_status", mode="before")
    @classmethod
    def default_order_status(cls, v):
        return v or "processing"

    @property
    def placed_at(self) -> datetime | None:
        """When the order was placed (createdAt, falling back to orderDate)."""
        return self.created_at or self.order_date

    @property
    def region(self) -> str:
        if self.shipping_address and self.shipping_address.state:
            return self.shipping_address.state
        return "Unknown"

    @property
    def city(self) -> str:
        return self.shipping_address.city if self.shipping_address else ""

    def items_text(self, currency_symbol: str = "₹") -> str:
        """One line per item, used by the wrapped detail column."""
        return "\n".join(
            f"{item.name} (Qty: {item.quantity}, {currency_symbol}{item.price:g})"
            for item in self.items
        )
