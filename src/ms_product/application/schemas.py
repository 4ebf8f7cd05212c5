"""Pydantic schemas for listings and product reads."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.ms_common.cents import cents_to_display
from src.ms_common.datetime_utils import iso_or_empty
from src.ms_product.domain.models import Product

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class CreateListingRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: int = Field(..., ge=0, description="Unit price in cents")
    number_in_stock: int = Field(0, ge=0)
    description: str = Field("", max_length=5000)
    image_url: str | None = Field(None, max_length=500)
    genre: str | None = Field(None, max_length=100)
    idempotency_key: str | None = Field(
        None,
        max_length=64,
        description="Re-send the same key to resume a partially applied listing",
    )

    def product_fields(self) -> dict[str, Any]:
        return self.model_dump(exclude={"idempotency_key"})


class UpdateListingRequest(BaseModel):
    """Every field optional; only fields present in the body are patched."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(None, min_length=1, max_length=200)
    price: int | None = Field(None, ge=0)
    number_in_stock: int | None = Field(None, ge=0)
    description: str | None = Field(None, max_length=5000)
    image_url: str | None = Field(None, max_length=500)
    genre: str | None = Field(None, max_length=100)

    def to_patch(self) -> dict[str, Any]:
        patch = self.model_dump(exclude_unset=True)
        # An explicit null only clears the optional columns.
        return {
            key: value
            for key, value in patch.items()
            if value is not None or key in ("image_url", "genre")
        }


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ProductResponse(BaseModel):
    id: str
    name: str
    price_cents: int
    price_display: str
    number_in_stock: int
    owner_id: str
    description: str
    image_url: str | None
    genre: str | None
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, product: Product) -> "ProductResponse":
        return cls(
            id=product.id,
            name=product.name,
            price_cents=product.price,
            price_display=cents_to_display(product.price),
            number_in_stock=product.number_in_stock,
            owner_id=product.owner_id,
            description=product.description,
            image_url=product.image_url,
            genre=product.genre,
            created_at=iso_or_empty(product.created_at),
            updated_at=iso_or_empty(product.updated_at),
        )


class ProductListResponse(BaseModel):
    items: list[ProductResponse]
    total: int
