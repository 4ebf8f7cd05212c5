"""Order repository Protocol: the canonical store contract for orders."""

from typing import Protocol

from src.ms_order.domain.models import Order


class OrderRepositoryProtocol(Protocol):
    async def create(self, order: Order) -> str: ...

    async def get(self, order_id: str) -> Order | None: ...

    async def delete(self, order_id: str) -> Order | None: ...

    async def list_by_customer_email(self, customer_email: str) -> list[Order]: ...

    async def list_by_owner(self, owner_id: str) -> list[Order]: ...

    async def list_all(self) -> list[Order]: ...
