"""Pydantic schemas for checkout and order reads."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, model_validator

from src.ms_common.cents import cents_to_display, line_total
from src.ms_common.datetime_utils import iso_or_empty
from src.ms_order.domain.models import BillingInfo, Order, PurchasedItem

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PurchasedItemIn(BaseModel):
    product_id: str = Field(..., min_length=1, max_length=64)
    product_name: str = Field(..., min_length=1, max_length=200)
    unit_price: int = Field(..., ge=0, description="Cents")
    quantity: int = Field(..., gt=0)

    def to_domain(self) -> PurchasedItem:
        return PurchasedItem(
            product_id=self.product_id,
            product_name=self.product_name,
            unit_price=self.unit_price,
            quantity=self.quantity,
            line_total=line_total(self.unit_price, self.quantity),
        )


class BillingInfoIn(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=200)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=1, max_length=20)
    country: str = Field(..., min_length=2, max_length=100)

    def to_domain(self) -> BillingInfo:
        return BillingInfo(**self.model_dump())


class CreateOrderRequest(BaseModel):
    purchased_items: list[PurchasedItemIn] = Field(..., min_length=1)
    billing_info: BillingInfoIn
    total_price: int | None = Field(
        None, ge=0, description="Cents; defaults to the sum of line totals"
    )
    timestamp: datetime | None = None
    idempotency_key: str | None = Field(None, max_length=64)

    @model_validator(mode="after")
    def total_matches_items(self) -> "CreateOrderRequest":
        if self.total_price is not None:
            expected = sum(line_total(i.unit_price, i.quantity) for i in self.purchased_items)
            if self.total_price != expected:
                raise ValueError(
                    f"total_price {self.total_price} != sum of line totals {expected}"
                )
        return self

    def order_fields(self) -> dict[str, Any]:
        items = [i.to_domain() for i in self.purchased_items]
        return {
            "purchased_items": items,
            "billing_info": self.billing_info.to_domain(),
            "total_price": (
                self.total_price
                if self.total_price is not None
                else sum(i.line_total for i in items)
            ),
            "timestamp": self.timestamp,
        }


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PurchasedItemResponse(BaseModel):
    product_id: str
    product_name: str
    unit_price_cents: int
    quantity: int
    line_total_cents: int
    line_total_display: str


class OrderResponse(BaseModel):
    id: str
    owner_id: str
    customer_email: str
    total_price_cents: int
    total_price_display: str
    timestamp: str
    purchased_items: list[PurchasedItemResponse]
    billing_info: dict[str, str] | None
    created_at: str

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        billing = order.billing_info
        return cls(
            id=order.id,
            owner_id=order.owner_id,
            customer_email=order.customer_email,
            total_price_cents=order.total_price,
            total_price_display=cents_to_display(order.total_price),
            timestamp=iso_or_empty(order.timestamp),
            purchased_items=[
                PurchasedItemResponse(
                    product_id=i.product_id,
                    product_name=i.product_name,
                    unit_price_cents=i.unit_price,
                    quantity=i.quantity,
                    line_total_cents=i.line_total,
                    line_total_display=cents_to_display(i.line_total),
                )
                for i in order.purchased_items
            ],
            billing_info=(
                {
                    "full_name": billing.full_name,
                    "address": billing.address,
                    "city": billing.city,
                    "postal_code": billing.postal_code,
                    "country": billing.country,
                }
                if billing is not None
                else None
            ),
            created_at=iso_or_empty(order.created_at),
        )


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    total: int
