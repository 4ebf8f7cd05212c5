"""Order domain model — pure dataclasses, no SQLAlchemy dependency.

An Order is created once at checkout and never edited afterwards; the only
later transition is deletion.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class PurchasedItem:
    """Snapshot of one purchased line, frozen at checkout time."""
    product_id: str
    product_name: str
    unit_price: int  # cents
    quantity: int
    line_total: int  # cents


@dataclass(frozen=True)
class BillingInfo:
    full_name: str
    address: str
    city: str
    postal_code: str
    country: str


@dataclass
class Order:
    id: str
    owner_id: str            # purchaser's account id
    customer_email: str
    total_price: int         # cents
    timestamp: datetime
    purchased_items: list[PurchasedItem] = field(default_factory=list)
    billing_info: BillingInfo | None = None
    created_at: datetime | None = None

    @property
    def items_total(self) -> int:
        return sum(item.line_total for item in self.purchased_items)


def items_to_json(items: list[PurchasedItem]) -> list[dict[str, Any]]:
    return [asdict(item) for item in items]


def items_from_json(raw: list[dict[str, Any]] | None) -> list[PurchasedItem]:
    return [PurchasedItem(**item) for item in raw or []]


def billing_to_json(billing: BillingInfo | None) -> dict[str, Any] | None:
    return asdict(billing) if billing is not None else None


def billing_from_json(raw: dict[str, Any] | None) -> BillingInfo | None:
    return BillingInfo(**raw) if raw else None
