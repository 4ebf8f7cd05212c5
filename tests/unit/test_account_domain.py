"""Unit tests for the Account aggregate's embedded lists."""

import pytest

from src.ms_account.domain.models import (
    CartItem,
    ListingRef,
    cart_from_json,
    cart_to_json,
    listings_from_json,
    listings_to_json,
)
from src.ms_common.errors import (
    CartItemNotFoundError,
    InvalidQuantityError,
    ReferenceMismatchError,
)
from tests.factories import make_account, make_product


class TestListings:
    def test_attach_listing_caches_summary(self) -> None:
        account = make_account()
        ref = account.attach_listing(make_product())
        assert ref == ListingRef("prd_1", "Blue Lamp", 2500, 3)
        assert account.listing_ids == ["prd_1"]

    def test_attach_twice_keeps_one_reference(self) -> None:
        account = make_account()
        account.attach_listing(make_product())
        account.attach_listing(make_product(price=3000))
        assert account.listing_ids == ["prd_1"]
        assert account.listings[0].price == 3000

    def test_detach_listing(self) -> None:
        account = make_account()
        account.attach_listing(make_product())
        account.attach_listing(make_product("prd_2", name="Red Lamp"))
        removed = account.detach_listing("prd_1")
        assert removed.product_id == "prd_1"
        assert account.listing_ids == ["prd_2"]

    def test_detach_unknown_listing_raises(self) -> None:
        with pytest.raises(ReferenceMismatchError):
            make_account().detach_listing("prd_1")

    def test_refresh_listing_only_touches_referenced(self) -> None:
        account = make_account()
        assert account.refresh_listing(make_product()) is False
        account.attach_listing(make_product())
        assert account.refresh_listing(make_product(name="Green Lamp")) is True
        assert account.listings[0].name == "Green Lamp"


class TestCart:
    def _item(self, quantity: int = 2) -> CartItem:
        return CartItem.from_product("cit_1", make_product(image_url="/img.png"), quantity)

    def test_from_product_prices_the_line(self) -> None:
        item = self._item(quantity=3)
        assert item.unit_price == 2500
        assert item.line_total == 7500
        assert item.image_url == "/img.png"

    def test_from_product_rejects_non_positive_quantity(self) -> None:
        with pytest.raises(InvalidQuantityError):
            CartItem.from_product("cit_1", make_product(), 0)

    def test_add_is_idempotent_by_item_id(self) -> None:
        account = make_account()
        account.add_cart_item(self._item())
        account.add_cart_item(self._item())
        assert len(account.cart) == 1

    def test_increment_updates_line_total(self) -> None:
        account = make_account()
        account.add_cart_item(self._item(quantity=2))
        item = account.increment_cart_item("cit_1")
        assert item.quantity == 3
        assert item.line_total == 7500
        assert account.cart[0] == item

    def test_decrement_to_zero_removes_line(self) -> None:
        account = make_account()
        account.add_cart_item(self._item(quantity=1))
        item = account.decrement_cart_item("cit_1")
        assert item.quantity == 0
        assert account.cart == []

    def test_decrement_above_one_keeps_line(self) -> None:
        account = make_account()
        account.add_cart_item(self._item(quantity=2))
        assert account.decrement_cart_item("cit_1").quantity == 1
        assert account.cart[0].line_total == 2500

    def test_unknown_item(self) -> None:
        account = make_account()
        with pytest.raises(CartItemNotFoundError):
            account.increment_cart_item("cit_missing")
        with pytest.raises(CartItemNotFoundError):
            account.remove_cart_item("cit_missing")

    def test_remove_returns_item(self) -> None:
        account = make_account()
        account.add_cart_item(self._item())
        assert account.remove_cart_item("cit_1").id == "cit_1"
        assert account.cart == []


class TestOrders:
    def test_attach_order_once(self) -> None:
        account = make_account()
        account.attach_order("ord_1")
        account.attach_order("ord_1")
        assert account.order_refs == ["ord_1"]

    def test_detach_unknown_order_raises(self) -> None:
        with pytest.raises(ReferenceMismatchError):
            make_account().detach_order("ord_1")

    def test_detach_all_returns_held_ids(self) -> None:
        account = make_account()
        account.attach_listing(make_product())
        account.attach_order("ord_1")
        assert account.detach_all() == (["prd_1"], ["ord_1"])
        assert account.listings == []
        assert account.order_refs == []


def test_embedded_lists_json_mapping() -> None:
    account = make_account()
    account.attach_listing(make_product())
    account.add_cart_item(CartItem.from_product("cit_1", make_product(), 2))
    assert listings_from_json(listings_to_json(account.listings)) == account.listings
    assert cart_from_json(cart_to_json(account.cart)) == account.cart
    assert listings_from_json(None) == []
