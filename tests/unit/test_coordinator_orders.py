"""SyncCoordinator: order creation, admin deletion and account deletion."""

from unittest.mock import AsyncMock

from src.ms_account.domain.models import Account
from src.ms_account.infrastructure.memory_store import InMemoryAccountRepository
from src.ms_common.errors import (
    AccountNotFoundError,
    OrderNotFoundError,
    ReferenceMismatchError,
)
from src.ms_order.infrastructure.memory_store import InMemoryOrderRepository
from src.ms_product.infrastructure.memory_store import InMemoryProductRepository
from src.ms_sync.application.coordinator import SyncCoordinator
from src.ms_sync.domain.outcome import Completed, Failed, PartialFailure
from tests.factories import listing_fields, make_order, order_fields


async def _placed(coordinator: SyncCoordinator, buyer: Account, key: str | None = None) -> str:
    outcome = await coordinator.create_order(buyer.email, order_fields(), idempotency_key=key)
    assert isinstance(outcome, Completed)
    return outcome.value.id


class TestCreateOrder:
    async def test_creates_order_and_reference(
        self,
        coordinator: SyncCoordinator,
        buyer: Account,
        accounts: InMemoryAccountRepository,
        orders: InMemoryOrderRepository,
    ) -> None:
        outcome = await coordinator.create_order(buyer.email, order_fields())

        assert isinstance(outcome, Completed)
        order = outcome.value
        assert order.owner_id == buyer.id
        assert order.total_price == 5000
        assert order.id in orders.records
        assert accounts.records[buyer.id].order_refs == [order.id]

    async def test_unknown_customer_creates_nothing(
        self, coordinator: SyncCoordinator, orders: InMemoryOrderRepository
    ) -> None:
        outcome = await coordinator.create_order("ghost@example.com", order_fields())
        assert isinstance(outcome, Failed)
        assert isinstance(outcome.error, AccountNotFoundError)
        assert orders.records == {}

    async def test_attach_failure_is_partial(
        self,
        coordinator: SyncCoordinator,
        buyer: Account,
        accounts: InMemoryAccountRepository,
        orders: InMemoryOrderRepository,
    ) -> None:
        accounts.save = AsyncMock(side_effect=ConnectionError("db down"))  # type: ignore[method-assign]
        outcome = await coordinator.create_order(buyer.email, order_fields())

        assert isinstance(outcome, PartialFailure)
        assert outcome.completed_steps == ("create_order",)
        assert outcome.entity_id in orders.records

    async def test_idempotent_retry(
        self,
        coordinator: SyncCoordinator,
        buyer: Account,
        accounts: InMemoryAccountRepository,
        orders: InMemoryOrderRepository,
    ) -> None:
        await _placed(coordinator, buyer, key="ord_k1")
        await _placed(coordinator, buyer, key="ord_k1")
        assert list(orders.records) == ["ord_k1"]
        assert accounts.records[buyer.id].order_refs == ["ord_k1"]


class TestDeleteOrder:
    async def test_detaches_then_deletes(
        self,
        coordinator: SyncCoordinator,
        buyer: Account,
        accounts: InMemoryAccountRepository,
        orders: InMemoryOrderRepository,
    ) -> None:
        order_id = await _placed(coordinator, buyer)
        outcome = await coordinator.delete_order(order_id)

        assert isinstance(outcome, Completed)
        assert outcome.pending is None
        assert orders.records == {}
        assert accounts.records[buyer.id].order_refs == []

    async def test_unknown_order(self, coordinator: SyncCoordinator) -> None:
        outcome = await coordinator.delete_order("ord_missing")
        assert isinstance(outcome, Failed)
        assert isinstance(outcome.error, OrderNotFoundError)

    async def test_missing_owner_keeps_order(
        self, coordinator: SyncCoordinator, orders: InMemoryOrderRepository
    ) -> None:
        await orders.create(make_order(owner_id="acc_gone"))
        outcome = await coordinator.delete_order("ord_1")
        assert isinstance(outcome, Failed)
        assert isinstance(outcome.error, AccountNotFoundError)
        assert "ord_1" in orders.records

    async def test_unreferenced_order_is_mismatch(
        self, coordinator: SyncCoordinator, buyer: Account, orders: InMemoryOrderRepository
    ) -> None:
        await orders.create(make_order(owner_id=buyer.id))
        outcome = await coordinator.delete_order("ord_1")
        assert isinstance(outcome, Failed)
        assert isinstance(outcome.error, ReferenceMismatchError)

    async def test_delete_failure_completes_with_pending(
        self,
        coordinator: SyncCoordinator,
        buyer: Account,
        accounts: InMemoryAccountRepository,
        orders: InMemoryOrderRepository,
    ) -> None:
        order_id = await _placed(coordinator, buyer)
        orders.delete = AsyncMock(side_effect=ConnectionError("db down"))  # type: ignore[method-assign]

        outcome = await coordinator.delete_order(order_id)

        assert isinstance(outcome, Completed)
        assert outcome.pending is not None
        assert outcome.pending.failed_step == "delete_order"
        assert accounts.records[buyer.id].order_refs == []


class TestDeleteAccount:
    async def test_cascades_to_owned_records(
        self,
        coordinator: SyncCoordinator,
        seller: Account,
        accounts: InMemoryAccountRepository,
        products: InMemoryProductRepository,
        orders: InMemoryOrderRepository,
    ) -> None:
        await coordinator.add_listing(seller.id, listing_fields(name="Lamp A"))
        await coordinator.add_listing(seller.id, listing_fields(name="Lamp B"))
        await _placed(coordinator, seller)
        # An orphan the account never referenced is swept up too.
        await orders.create(make_order("ord_orphan", owner_id=seller.id))

        outcome = await coordinator.delete_account(seller.id)

        assert isinstance(outcome, Completed)
        assert seller.id not in accounts.records
        assert products.records == {}
        assert orders.records == {}

    async def test_leaves_other_accounts_alone(
        self,
        coordinator: SyncCoordinator,
        seller: Account,
        buyer: Account,
        products: InMemoryProductRepository,
    ) -> None:
        await coordinator.add_listing(seller.id, listing_fields())
        outcome = await coordinator.delete_account(buyer.id)
        assert isinstance(outcome, Completed)
        assert len(products.records) == 1

    async def test_failure_midway_is_partial(
        self,
        coordinator: SyncCoordinator,
        seller: Account,
        accounts: InMemoryAccountRepository,
        products: InMemoryProductRepository,
    ) -> None:
        await coordinator.add_listing(seller.id, listing_fields())
        products.delete = AsyncMock(side_effect=ConnectionError("db down"))  # type: ignore[method-assign]

        outcome = await coordinator.delete_account(seller.id)

        assert isinstance(outcome, PartialFailure)
        assert outcome.completed_steps == ("detach_all",)
        assert accounts.records[seller.id].listings == []
        assert len(products.records) == 1

    async def test_unknown_account(self, coordinator: SyncCoordinator) -> None:
        outcome = await coordinator.delete_account("acc_missing")
        assert isinstance(outcome, Failed)
        assert isinstance(outcome.error, AccountNotFoundError)
