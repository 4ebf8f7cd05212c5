"""In-memory order store (useful for tests and local runs)."""

import asyncio
import copy

from src.ms_common.datetime_utils import utc_now
from src.ms_order.domain.models import Order


class InMemoryOrderRepository:
    def __init__(self) -> None:
        self.records: dict[str, Order] = {}

    async def create(self, order: Order) -> str:
        await asyncio.sleep(0)
        order.created_at = order.created_at or utc_now()
        self.records[order.id] = copy.deepcopy(order)
        return order.id

    async def get(self, order_id: str) -> Order | None:
        await asyncio.sleep(0)
        found = self.records.get(order_id)
        return copy.deepcopy(found) if found is not None else None

    async def delete(self, order_id: str) -> Order | None:
        await asyncio.sleep(0)
        return self.records.pop(order_id, None)

    async def list_by_customer_email(self, customer_email: str) -> list[Order]:
        await asyncio.sleep(0)
        return [
            copy.deepcopy(o)
            for o in self.records.values()
            if o.customer_email == customer_email
        ]

    async def list_by_owner(self, owner_id: str) -> list[Order]:
        await asyncio.sleep(0)
        return [copy.deepcopy(o) for o in self.records.values() if o.owner_id == owner_id]

    async def list_all(self) -> list[Order]:
        await asyncio.sleep(0)
        return [copy.deepcopy(o) for o in self.records.values()]
