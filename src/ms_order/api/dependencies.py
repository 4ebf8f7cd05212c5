"""FastAPI dependency for the order store. Tests override it."""

from functools import lru_cache

from src.ms_order.domain.repository import OrderRepositoryProtocol
from src.ms_order.infrastructure.persistence import OrderRepository


@lru_cache
def get_order_repository() -> OrderRepositoryProtocol:
    return OrderRepository()
