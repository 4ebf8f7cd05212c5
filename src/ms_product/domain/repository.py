"""Product repository Protocol: the canonical store contract for products.

Every call is single-document atomic and commits on its own; nothing here
knows about accounts.
"""

from typing import Any, Protocol

from src.ms_product.domain.models import Product


class ProductRepositoryProtocol(Protocol):
    async def create(self, product: Product) -> str: ...

    async def get(self, product_id: str) -> Product | None: ...

    async def update(self, product_id: str, patch: dict[str, Any]) -> Product | None: ...

    async def delete(self, product_id: str) -> Product | None: ...

    async def find_by_field(self, field: str, value: Any) -> Product | None: ...

    async def list_by_owner(self, owner_id: str) -> list[Product]: ...

    async def list_all(self) -> list[Product]: ...
