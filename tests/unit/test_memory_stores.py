"""Unit tests for the in-memory stores used by tests and local runs."""

import pytest

from src.ms_account.infrastructure.memory_store import InMemoryAccountRepository
from src.ms_common.errors import (
    ConcurrentModificationError,
    DuplicateNameError,
    EmailExistsError,
)
from src.ms_order.infrastructure.memory_store import InMemoryOrderRepository
from src.ms_product.infrastructure.memory_store import InMemoryProductRepository
from tests.factories import make_account, make_order, make_product


class TestProductStore:
    async def test_create_get_update_delete(self) -> None:
        store = InMemoryProductRepository()
        assert await store.create(make_product()) == "prd_1"

        updated = await store.update("prd_1", {"price": 10})
        assert updated is not None and updated.price == 10
        assert (await store.get("prd_1")).price == 10  # type: ignore[union-attr]

        assert (await store.delete("prd_1")) is not None
        assert await store.get("prd_1") is None
        assert await store.delete("prd_1") is None
        assert await store.update("prd_1", {"price": 1}) is None

    async def test_returned_records_are_copies(self) -> None:
        store = InMemoryProductRepository()
        await store.create(make_product())
        fetched = await store.get("prd_1")
        fetched.price = 1  # type: ignore[union-attr]
        assert store.records["prd_1"].price == 2500

    async def test_name_is_unique(self) -> None:
        store = InMemoryProductRepository()
        await store.create(make_product())
        with pytest.raises(DuplicateNameError):
            await store.create(make_product("prd_2"))
        await store.create(make_product("prd_2", name="Red Lamp"))
        with pytest.raises(DuplicateNameError):
            await store.update("prd_2", {"name": "Blue Lamp"})

    async def test_find_by_field(self) -> None:
        store = InMemoryProductRepository()
        await store.create(make_product())
        assert (await store.find_by_field("name", "Blue Lamp")).id == "prd_1"  # type: ignore[union-attr]
        assert await store.find_by_field("name", "Nope") is None
        with pytest.raises(ValueError):
            await store.find_by_field("description", "")


class TestAccountStore:
    async def test_save_bumps_version(self) -> None:
        store = InMemoryAccountRepository()
        account = await store.create(make_account())
        assert account.version == 0
        account.attach_order("ord_1")
        saved = await store.save(account)
        assert saved.version == 1
        assert (await store.get("acc_1")).order_refs == ["ord_1"]  # type: ignore[union-attr]

    async def test_stale_save_is_rejected(self) -> None:
        store = InMemoryAccountRepository()
        await store.create(make_account())
        first = await store.get("acc_1")
        second = await store.get("acc_1")
        first.attach_order("ord_1")  # type: ignore[union-attr]
        second.attach_order("ord_2")  # type: ignore[union-attr]
        await store.save(first)  # type: ignore[arg-type]
        with pytest.raises(ConcurrentModificationError):
            await store.save(second)  # type: ignore[arg-type]
        assert store.records["acc_1"].order_refs == ["ord_1"]

    async def test_email_is_unique(self) -> None:
        store = InMemoryAccountRepository()
        await store.create(make_account())
        with pytest.raises(EmailExistsError):
            await store.create(make_account("acc_2"))


class TestOrderStore:
    async def test_lookup_by_email_and_owner(self) -> None:
        store = InMemoryOrderRepository()
        await store.create(make_order())
        assert [o.id for o in await store.list_by_customer_email("bea@example.com")] == ["ord_1"]
        assert [o.id for o in await store.list_by_owner("acc_buyer")] == ["ord_1"]
        assert await store.list_by_owner("acc_other") == []
