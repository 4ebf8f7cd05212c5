"""Pydantic schemas for the account view and cart requests."""

from pydantic import BaseModel, Field

from src.ms_account.domain.models import Account, CartItem, ListingRef
from src.ms_common.cents import cents_to_display
from src.ms_common.datetime_utils import iso_or_empty

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class AddCartItemRequest(BaseModel):
    product_name: str = Field(..., min_length=1, max_length=200)
    quantity: int = Field(1, gt=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ListingRefResponse(BaseModel):
    product_id: str
    name: str
    price_cents: int
    price_display: str
    number_in_stock: int

    @classmethod
    def from_domain(cls, ref: ListingRef) -> "ListingRefResponse":
        return cls(
            product_id=ref.product_id,
            name=ref.name,
            price_cents=ref.price,
            price_display=cents_to_display(ref.price),
            number_in_stock=ref.number_in_stock,
        )


class CartItemResponse(BaseModel):
    id: str
    product_id: str
    product_name: str
    image_url: str | None
    unit_price_cents: int
    quantity: int
    line_total_cents: int
    line_total_display: str
    removed: bool = False  # True when a decrement took the line to zero

    @classmethod
    def from_domain(cls, item: CartItem) -> "CartItemResponse":
        return cls(
            id=item.id,
            product_id=item.product_id,
            product_name=item.product_name,
            image_url=item.image_url,
            unit_price_cents=item.unit_price,
            quantity=item.quantity,
            line_total_cents=item.line_total,
            line_total_display=cents_to_display(item.line_total),
            removed=item.quantity == 0,
        )


class AccountResponse(BaseModel):
    id: str
    name: str
    email: str
    listings: list[ListingRefResponse]
    cart: list[CartItemResponse]
    cart_total_cents: int
    cart_total_display: str
    order_refs: list[str]
    version: int
    created_at: str

    @classmethod
    def from_domain(cls, account: Account) -> "AccountResponse":
        cart_total = sum(item.line_total for item in account.cart)
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            listings=[ListingRefResponse.from_domain(r) for r in account.listings],
            cart=[CartItemResponse.from_domain(i) for i in account.cart],
            cart_total_cents=cart_total,
            cart_total_display=cents_to_display(cart_total),
            order_refs=list(account.order_refs),
            version=account.version,
            created_at=iso_or_empty(account.created_at),
        )
