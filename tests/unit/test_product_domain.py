"""Unit tests for Product construction and patch rules."""

import pytest

from src.ms_common.errors import InvalidPatchError, InvalidProductError
from src.ms_product.domain.models import apply_patch, build_product, validate_patch
from tests.factories import listing_fields, make_product


class TestBuildProduct:
    def test_builds_with_owner_and_defaults(self) -> None:
        product = build_product("prd_1", "acc_1", {"name": "Lamp", "price": 100})
        assert product.owner_id == "acc_1"
        assert product.number_in_stock == 0
        assert product.description == ""

    def test_requires_name_and_price(self) -> None:
        with pytest.raises(InvalidProductError):
            build_product("prd_1", "acc_1", {"name": "Lamp"})
        with pytest.raises(InvalidProductError):
            build_product("prd_1", "acc_1", {"price": 100})

    def test_rejects_negative_values(self) -> None:
        with pytest.raises(InvalidProductError):
            build_product("prd_1", "acc_1", listing_fields(price=-1))
        with pytest.raises(InvalidProductError):
            build_product("prd_1", "acc_1", listing_fields(stock=-1))

    def test_rejects_identity_fields(self) -> None:
        fields = {**listing_fields(), "owner_id": "acc_other"}
        with pytest.raises(InvalidProductError):
            build_product("prd_1", "acc_1", fields)


class TestPatch:
    def test_only_whitelisted_fields(self) -> None:
        with pytest.raises(InvalidPatchError):
            validate_patch({"price": 1, "owner_id": "acc_x"})

    def test_apply_patch_returns_copy(self) -> None:
        original = make_product()
        patched = apply_patch(original, {"price": 999, "genre": "home"})
        assert patched.price == 999
        assert patched.genre == "home"
        assert original.price == 2500
        assert patched.id == original.id

    @pytest.mark.parametrize(
        "patch",
        [
            {"price": -1},
            {"number_in_stock": -3},
            {"price": "12.50"},
            {"number_in_stock": True},
            {"name": ""},
        ],
    )
    def test_rejects_values_breaking_record_rules(self, patch: dict) -> None:
        with pytest.raises(InvalidProductError):
            validate_patch(patch)

    def test_empty_patch_is_valid(self) -> None:
        assert validate_patch({}) == {}
