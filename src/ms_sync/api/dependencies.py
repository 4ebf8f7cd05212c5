"""FastAPI dependency wiring the coordinator to the three stores."""

from typing import Annotated

from fastapi import Depends

from src.ms_account.api.dependencies import get_account_repository
from src.ms_account.domain.repository import AccountRepositoryProtocol
from src.ms_order.api.dependencies import get_order_repository
from src.ms_order.domain.repository import OrderRepositoryProtocol
from src.ms_product.api.dependencies import get_product_repository
from src.ms_product.domain.repository import ProductRepositoryProtocol
from src.ms_sync.application.coordinator import SyncCoordinator


def get_coordinator(
    accounts: Annotated[AccountRepositoryProtocol, Depends(get_account_repository)],
    products: Annotated[ProductRepositoryProtocol, Depends(get_product_repository)],
    orders: Annotated[OrderRepositoryProtocol, Depends(get_order_repository)],
) -> SyncCoordinator:
    return SyncCoordinator(accounts, products, orders)
