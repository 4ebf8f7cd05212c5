"""In-memory product store (useful for tests and local runs).

Conforms to ProductRepositoryProtocol. Records are copied on the way in and
out so callers never share a mutable Product with the store.
"""

import asyncio
import copy
from typing import Any

from src.ms_common.datetime_utils import utc_now
from src.ms_common.errors import DuplicateNameError
from src.ms_product.domain.models import LOOKUP_FIELDS, Product, apply_patch


class InMemoryProductRepository:
    def __init__(self) -> None:
        self.records: dict[str, Product] = {}

    async def create(self, product: Product) -> str:
        await asyncio.sleep(0)
        if any(p.name == product.name for p in self.records.values()):
            raise DuplicateNameError(product.name)
        now = utc_now()
        product.created_at = product.created_at or now
        product.updated_at = now
        self.records[product.id] = copy.deepcopy(product)
        return product.id

    async def get(self, product_id: str) -> Product | None:
        await asyncio.sleep(0)
        found = self.records.get(product_id)
        return copy.deepcopy(found) if found is not None else None

    async def update(self, product_id: str, patch: dict[str, Any]) -> Product | None:
        await asyncio.sleep(0)
        current = self.records.get(product_id)
        if current is None:
            return None
        updated = apply_patch(current, patch)
        if "name" in patch and any(
            p.name == updated.name and p.id != product_id for p in self.records.values()
        ):
            raise DuplicateNameError(updated.name)
        updated.updated_at = utc_now()
        self.records[product_id] = updated
        return copy.deepcopy(updated)

    async def delete(self, product_id: str) -> Product | None:
        await asyncio.sleep(0)
        return self.records.pop(product_id, None)

    async def find_by_field(self, field: str, value: Any) -> Product | None:
        if field not in LOOKUP_FIELDS:
            raise ValueError(f"Products cannot be looked up by {field!r}")
        await asyncio.sleep(0)
        for product in self.records.values():
            if getattr(product, field) == value:
                return copy.deepcopy(product)
        return None

    async def list_by_owner(self, owner_id: str) -> list[Product]:
        await asyncio.sleep(0)
        return [copy.deepcopy(p) for p in self.records.values() if p.owner_id == owner_id]

    async def list_all(self) -> list[Product]:
        await asyncio.sleep(0)
        return [copy.deepcopy(p) for p in self.records.values()]
