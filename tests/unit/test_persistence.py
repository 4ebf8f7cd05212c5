"""Unit tests for the PostgreSQL repositories using a mocked session factory."""

from datetime import UTC, datetime
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from src.ms_account.infrastructure.persistence import AccountRepository
from src.ms_common import jsonb
from src.ms_common.errors import (
    AccountNotFoundError,
    ConcurrentModificationError,
    DuplicateNameError,
    EmailExistsError,
    InvalidPatchError,
)
from src.ms_order.infrastructure.persistence import OrderRepository
from src.ms_product.infrastructure.persistence import ProductRepository
from tests.factories import make_account, make_order, make_product

_NOW = datetime(2026, 1, 5, 12, 0, tzinfo=UTC)


def _factory(db: AsyncMock) -> MagicMock:
    factory = MagicMock()
    factory.return_value.__aenter__.return_value = db
    return factory


def _result(row: Any = None, rows: list[Any] | None = None) -> MagicMock:
    result = MagicMock()
    result.fetchone.return_value = row
    result.fetchall.return_value = rows or []
    return result


def _product_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", "prd_1")
    row.name = kwargs.get("name", "Blue Lamp")
    row.price = kwargs.get("price", 2500)
    row.number_in_stock = kwargs.get("number_in_stock", 3)
    row.owner_id = kwargs.get("owner_id", "acc_seller")
    row.description = ""
    row.image_url = None
    row.genre = None
    row.created_at = _NOW
    row.updated_at = _NOW
    return row


def _account_row(**kwargs: Any) -> MagicMock:
    row = MagicMock()
    row.id = kwargs.get("id", "acc_1")
    row.name = "Ann"
    row.email = kwargs.get("email", "a@example.com")
    row.password_hash = "x"
    # asyncpg returns JSONB as text for untyped statements
    row.listings = kwargs.get(
        "listings",
        '[{"product_id":"prd_1","name":"Blue Lamp","price":2500,"number_in_stock":3}]',
    )
    row.cart = kwargs.get("cart", "[]")
    row.order_refs = kwargs.get("order_refs", '["ord_1"]')
    row.version = kwargs.get("version", 1)
    row.created_at = _NOW
    row.updated_at = _NOW
    return row


def _order_row() -> MagicMock:
    row = MagicMock()
    row.id = "ord_1"
    row.owner_id = "acc_buyer"
    row.customer_email = "bea@example.com"
    row.total_price = 5000
    row.timestamp = _NOW
    row.purchased_items = [
        {
            "product_id": "prd_1",
            "product_name": "Blue Lamp",
            "unit_price": 2500,
            "quantity": 2,
            "line_total": 5000,
        }
    ]
    row.billing_info = None
    row.created_at = _NOW
    return row


def _unique_violation(constraint: str) -> IntegrityError:
    return IntegrityError(
        "INSERT", {}, Exception(f'duplicate key value violates unique constraint "{constraint}"')
    )


class TestProductRepository:
    async def test_create_inserts_and_stamps_timestamps(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [_result(None), _result(_product_row())]
        repo = ProductRepository(_factory(db))
        product = make_product()

        assert await repo.create(product) == "prd_1"
        assert product.created_at == _NOW
        db.commit.assert_awaited_once()

    async def test_create_rejects_existing_name(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(_product_row(id="prd_other"))
        repo = ProductRepository(_factory(db))

        with pytest.raises(DuplicateNameError):
            await repo.create(make_product())
        assert db.execute.await_count == 1

    async def test_create_maps_unique_violation(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [_result(None), _unique_violation("uq_products_name")]
        repo = ProductRepository(_factory(db))

        with pytest.raises(DuplicateNameError):
            await repo.create(make_product())
        db.rollback.assert_awaited_once()

    async def test_get_returns_none_when_absent(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(None)
        assert await ProductRepository(_factory(db)).get("prd_missing") is None

    async def test_update_returns_post_update_record(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(_product_row(price=999))
        updated = await ProductRepository(_factory(db)).update("prd_1", {"price": 999})

        assert updated is not None
        assert updated.price == 999
        statement, params = db.execute.await_args.args
        assert "price = :price" in str(statement)
        assert params == {"price": 999, "id": "prd_1"}

    async def test_update_rejects_unknown_field(self) -> None:
        repo = ProductRepository(_factory(AsyncMock()))
        with pytest.raises(InvalidPatchError):
            await repo.update("prd_1", {"owner_id": "acc_x"})

    async def test_update_missing_returns_none(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(None)
        assert await ProductRepository(_factory(db)).update("prd_1", {"price": 1}) is None

    async def test_find_by_unknown_field(self) -> None:
        repo = ProductRepository(_factory(AsyncMock()))
        with pytest.raises(ValueError):
            await repo.find_by_field("price", 1)

    async def test_delete_returns_deleted_record(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(_product_row())
        deleted = await ProductRepository(_factory(db)).delete("prd_1")
        assert deleted is not None and deleted.id == "prd_1"
        db.commit.assert_awaited_once()

    async def test_list_by_owner(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(rows=[_product_row(), _product_row(id="prd_2")])
        found = await ProductRepository(_factory(db)).list_by_owner("acc_seller")
        assert [p.id for p in found] == ["prd_1", "prd_2"]


class TestAccountRepository:
    async def test_get_decodes_embedded_lists(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(_account_row())
        account = await AccountRepository(_factory(db)).get("acc_1")

        assert account is not None
        assert account.listing_ids == ["prd_1"]
        assert account.order_refs == ["ord_1"]
        assert account.cart == []
        assert account.version == 1

    async def test_create_duplicate_email(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = _unique_violation("uq_accounts_email")
        with pytest.raises(EmailExistsError):
            await AccountRepository(_factory(db)).create(make_account())

    async def test_save_sends_full_document_and_version(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(_account_row(version=2))
        account = make_account()
        account.version = 1
        account.attach_order("ord_9")

        saved = await AccountRepository(_factory(db)).save(account)

        assert saved.version == 2
        params = db.execute.await_args.args[1]
        assert params["version"] == 1
        assert jsonb.loads(params["order_refs"]) == ["ord_9"]
        db.commit.assert_awaited_once()

    async def test_save_version_conflict(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [_result(None), _result(MagicMock())]
        with pytest.raises(ConcurrentModificationError):
            await AccountRepository(_factory(db)).save(make_account())
        db.commit.assert_not_awaited()

    async def test_save_missing_account(self) -> None:
        db = AsyncMock()
        db.execute.side_effect = [_result(None), _result(None)]
        with pytest.raises(AccountNotFoundError):
            await AccountRepository(_factory(db)).save(make_account())


class TestOrderRepository:
    async def test_create_serializes_items(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(_order_row())
        order = make_order()

        assert await OrderRepository(_factory(db)).create(order) == "ord_1"
        params = db.execute.await_args.args[1]
        assert jsonb.loads(params["purchased_items"])[0]["line_total"] == 5000
        assert jsonb.loads(params["billing_info"])["city"] == "Springfield"
        assert order.created_at == _NOW

    async def test_get_decodes_items(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(_order_row())
        order = await OrderRepository(_factory(db)).get("ord_1")

        assert order is not None
        assert order.purchased_items[0].quantity == 2
        assert order.billing_info is None
        assert order.items_total == 5000

    async def test_delete_absent_returns_none(self) -> None:
        db = AsyncMock()
        db.execute.return_value = _result(None)
        assert await OrderRepository(_factory(db)).delete("ord_missing") is None
