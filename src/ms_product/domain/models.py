"""Product domain model — pure dataclass, no SQLAlchemy dependency."""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from src.ms_common.errors import InvalidPatchError, InvalidProductError

# Only these fields may change through UpdateListing. Applied one by one,
# never merged, so nested input cannot leak into the canonical record.
PATCHABLE_FIELDS: frozenset[str] = frozenset(
    {"name", "price", "description", "image_url", "genre", "number_in_stock"}
)

# Fields find_by_field may look up by.
LOOKUP_FIELDS: frozenset[str] = frozenset({"id", "name", "owner_id"})


@dataclass
class Product:
    id: str
    name: str
    price: int               # cents, >= 0
    number_in_stock: int     # >= 0
    owner_id: str            # account id of the seller
    description: str = ""
    image_url: str | None = None
    genre: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


def _check_values(fields: dict[str, Any]) -> None:
    """Value rules shared by new listings and patches."""
    if "name" in fields and not (isinstance(fields["name"], str) and fields["name"].strip()):
        raise InvalidProductError("name must be a non-empty string")
    for key in ("price", "number_in_stock"):
        if key not in fields:
            continue
        value = fields[key]
        if not isinstance(value, int) or isinstance(value, bool):
            raise InvalidProductError(f"{key} must be an integer, got {value!r}")
        if value < 0:
            raise InvalidProductError(f"{key} must be non-negative, got {value}")


def validate_patch(patch: dict[str, Any]) -> dict[str, Any]:
    """Reject keys outside PATCHABLE_FIELDS and values that break the record invariants.

    Returns the patch unchanged.
    """
    unknown = [key for key in patch if key not in PATCHABLE_FIELDS]
    if unknown:
        raise InvalidPatchError(unknown)
    _check_values(patch)
    return patch


def apply_patch(product: Product, patch: dict[str, Any]) -> Product:
    """Return a copy of ``product`` with whitelisted fields replaced."""
    return replace(product, **validate_patch(patch))


def build_product(product_id: str, owner_id: str, fields: dict[str, Any]) -> Product:
    """Construct a new Product from listing fields, enforcing the record invariants."""
    unknown = [key for key in fields if key not in PATCHABLE_FIELDS]
    if unknown:
        raise InvalidProductError(f"unknown fields {', '.join(sorted(unknown))}")
    for required in ("name", "price"):
        if required not in fields:
            raise InvalidProductError(f"{required} is required")
    _check_values(fields)
    return Product(id=product_id, owner_id=owner_id, **{"number_in_stock": 0, **fields})
