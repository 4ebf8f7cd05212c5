"""Shared test fixtures."""

import os

# Settings() requires JWT_SECRET; set it before anything imports config.settings.
os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")

import pytest

from src.ms_account.domain.models import Account
from src.ms_account.infrastructure.memory_store import InMemoryAccountRepository
from src.ms_order.infrastructure.memory_store import InMemoryOrderRepository
from src.ms_product.infrastructure.memory_store import InMemoryProductRepository
from src.ms_sync.application.coordinator import SyncCoordinator


@pytest.fixture
def accounts() -> InMemoryAccountRepository:
    return InMemoryAccountRepository()


@pytest.fixture
def products() -> InMemoryProductRepository:
    return InMemoryProductRepository()


@pytest.fixture
def orders() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def coordinator(
    accounts: InMemoryAccountRepository,
    products: InMemoryProductRepository,
    orders: InMemoryOrderRepository,
) -> SyncCoordinator:
    return SyncCoordinator(accounts, products, orders, store_timeout=1.0, save_retries=3)


@pytest.fixture
async def seller(accounts: InMemoryAccountRepository) -> Account:
    return await accounts.create(
        Account(id="acc_seller", name="Sam", email="sam@example.com", password_hash="x")
    )


@pytest.fixture
async def buyer(accounts: InMemoryAccountRepository) -> Account:
    return await accounts.create(
        Account(id="acc_buyer", name="Bea", email="bea@example.com", password_hash="x")
    )
