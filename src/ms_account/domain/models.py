"""Account aggregate — pure dataclasses, no SQLAlchemy dependency.

The account embeds three ordered sequences: listing references, cart lines
and order ids. They hold ids and value copies only, never live objects from
another aggregate. Every change to them goes through the methods below so
that the embedded invariants hold:

  - a product / order id appears at most once in listings / order_refs
  - every cart line has quantity > 0 and line_total == unit_price * quantity
"""

from dataclasses import asdict, dataclass, field, replace
from datetime import datetime
from typing import Any

from src.ms_common.cents import line_total
from src.ms_common.errors import (
    CartItemNotFoundError,
    InvalidQuantityError,
    ReferenceMismatchError,
)
from src.ms_product.domain.models import Product


@dataclass(frozen=True)
class ListingRef:
    """Reference to a canonical Product plus a cached summary of it.

    product_id is the authority; name/price/number_in_stock are a read cache
    refreshed from the canonical record after every UpdateListing.
    """
    product_id: str
    name: str
    price: int  # cents
    number_in_stock: int

    @classmethod
    def from_product(cls, product: Product) -> "ListingRef":
        return cls(
            product_id=product.id,
            name=product.name,
            price=product.price,
            number_in_stock=product.number_in_stock,
        )


@dataclass(frozen=True)
class CartItem:
    """One cart line. Priced at add time; not repriced when the product changes."""
    id: str
    product_id: str
    product_name: str
    unit_price: int  # cents
    quantity: int
    line_total: int  # cents
    image_url: str | None = None

    @classmethod
    def from_product(cls, item_id: str, product: Product, quantity: int) -> "CartItem":
        if quantity <= 0:
            raise InvalidQuantityError(quantity)
        return cls(
            id=item_id,
            product_id=product.id,
            product_name=product.name,
            unit_price=product.price,
            quantity=quantity,
            line_total=line_total(product.price, quantity),
            image_url=product.image_url,
        )

    def with_quantity(self, quantity: int) -> "CartItem":
        return replace(
            self, quantity=quantity, line_total=line_total(self.unit_price, quantity)
        )


@dataclass
class Account:
    id: str
    name: str
    email: str
    password_hash: str
    listings: list[ListingRef] = field(default_factory=list)
    cart: list[CartItem] = field(default_factory=list)
    order_refs: list[str] = field(default_factory=list)
    version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    # -- listings ---------------------------------------------------------

    @property
    def listing_ids(self) -> list[str]:
        return [ref.product_id for ref in self.listings]

    def has_listing(self, product_id: str) -> bool:
        return any(ref.product_id == product_id for ref in self.listings)

    def attach_listing(self, product: Product) -> ListingRef:
        """Append a reference to ``product``; replaying it refreshes instead of duplicating."""
        ref = ListingRef.from_product(product)
        if not self.refresh_listing(product):
            self.listings.append(ref)
        return ref

    def detach_listing(self, product_id: str) -> ListingRef:
        for idx, ref in enumerate(self.listings):
            if ref.product_id == product_id:
                return self.listings.pop(idx)
        raise ReferenceMismatchError(self.id, product_id)

    def refresh_listing(self, product: Product) -> bool:
        """Replace the cached summary for ``product``. False when not referenced."""
        for idx, ref in enumerate(self.listings):
            if ref.product_id == product.id:
                self.listings[idx] = ListingRef.from_product(product)
                return True
        return False

    # -- cart -------------------------------------------------------------

    def find_cart_item(self, item_id: str) -> CartItem:
        for item in self.cart:
            if item.id == item_id:
                return item
        raise CartItemNotFoundError(item_id)

    def add_cart_item(self, item: CartItem) -> CartItem:
        if item.quantity <= 0:
            raise InvalidQuantityError(item.quantity)
        if not any(existing.id == item.id for existing in self.cart):
            self.cart.append(item)
        return item

    def increment_cart_item(self, item_id: str) -> CartItem:
        return self._set_cart_quantity(item_id, self.find_cart_item(item_id).quantity + 1)

    def decrement_cart_item(self, item_id: str) -> CartItem:
        """Lower the quantity by one; a line that reaches zero leaves the cart."""
        return self._set_cart_quantity(item_id, self.find_cart_item(item_id).quantity - 1)

    def remove_cart_item(self, item_id: str) -> CartItem:
        item = self.find_cart_item(item_id)
        self.cart.remove(item)
        return item

    def _set_cart_quantity(self, item_id: str, quantity: int) -> CartItem:
        idx = next(i for i, item in enumerate(self.cart) if item.id == item_id)
        updated = self.cart[idx].with_quantity(quantity)
        if quantity <= 0:
            del self.cart[idx]
        else:
            self.cart[idx] = updated
        return updated

    # -- orders -----------------------------------------------------------

    def attach_order(self, order_id: str) -> None:
        if order_id not in self.order_refs:
            self.order_refs.append(order_id)

    def detach_order(self, order_id: str) -> None:
        if order_id not in self.order_refs:
            raise ReferenceMismatchError(self.id, order_id)
        self.order_refs.remove(order_id)

    # -- account deletion -------------------------------------------------

    def detach_all(self) -> tuple[list[str], list[str]]:
        """Drop every listing and order reference; return the ids that were held."""
        product_ids = self.listing_ids
        order_ids = list(self.order_refs)
        self.listings = []
        self.order_refs = []
        return product_ids, order_ids


# ---------------------------------------------------------------------------
# JSON mapping for the embedded columns
# ---------------------------------------------------------------------------


def listings_to_json(listings: list[ListingRef]) -> list[dict[str, Any]]:
    return [asdict(ref) for ref in listings]


def listings_from_json(raw: list[dict[str, Any]] | None) -> list[ListingRef]:
    return [ListingRef(**ref) for ref in raw or []]


def cart_to_json(cart: list[CartItem]) -> list[dict[str, Any]]:
    return [asdict(item) for item in cart]


def cart_from_json(raw: list[dict[str, Any]] | None) -> list[CartItem]:
    return [CartItem(**item) for item in raw or []]
