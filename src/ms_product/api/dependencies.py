"""FastAPI dependency for the product store. Tests override it."""

from functools import lru_cache

from src.ms_product.domain.repository import ProductRepositoryProtocol
from src.ms_product.infrastructure.persistence import ProductRepository


@lru_cache
def get_product_repository() -> ProductRepositoryProtocol:
    return ProductRepository()
