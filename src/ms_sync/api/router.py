"""Compound write API — every route goes through the SyncCoordinator."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request, status

from src.ms_account.application.schemas import (
    AccountResponse,
    AddCartItemRequest,
    CartItemResponse,
)
from src.ms_account.domain.models import Account, CartItem
from src.ms_common.response import ApiResponse
from src.ms_gateway.auth.dependencies import get_current_account, require_admin
from src.ms_order.application.schemas import CreateOrderRequest, OrderResponse
from src.ms_order.domain.models import Order
from src.ms_product.application.schemas import (
    CreateListingRequest,
    ProductResponse,
    UpdateListingRequest,
)
from src.ms_product.domain.models import Product
from src.ms_sync.api.dependencies import get_coordinator
from src.ms_sync.api.presenter import present
from src.ms_sync.application.coordinator import SyncCoordinator

router = APIRouter(tags=["sync"])

CurrentAccount = Annotated[Account, Depends(get_current_account)]
Coordinator = Annotated[SyncCoordinator, Depends(get_coordinator)]


def _product(p: Product) -> dict[str, Any]:
    return ProductResponse.from_domain(p).model_dump()


def _cart_item(i: CartItem) -> dict[str, Any]:
    return CartItemResponse.from_domain(i).model_dump()


def _order(o: Order) -> dict[str, Any]:
    return OrderResponse.from_domain(o).model_dump()


# ---------------------------------------------------------------------------
# Listings
# ---------------------------------------------------------------------------


@router.post("/listings", status_code=status.HTTP_201_CREATED)
async def add_listing(
    body: CreateListingRequest,
    current: CurrentAccount,
    coordinator: Coordinator,
    request: Request,
) -> ApiResponse:
    outcome = await coordinator.add_listing(
        current.id, body.product_fields(), idempotency_key=body.idempotency_key
    )
    return present(outcome, _product, request, message="Listing created")


@router.patch("/listings/{product_id}")
async def update_listing(
    product_id: str,
    body: UpdateListingRequest,
    current: CurrentAccount,
    coordinator: Coordinator,
    request: Request,
) -> ApiResponse:
    outcome = await coordinator.update_listing(current.id, product_id, body.to_patch())
    return present(outcome, _product, request, message="Listing updated")


@router.delete("/listings/{product_id}")
async def remove_listing(
    product_id: str,
    current: CurrentAccount,
    coordinator: Coordinator,
    request: Request,
) -> ApiResponse:
    outcome = await coordinator.remove_listing(current.id, product_id)
    return present(outcome, _product, request, message="Listing removed")


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------


@router.post("/cart/items", status_code=status.HTTP_201_CREATED)
async def add_cart_item(
    body: AddCartItemRequest,
    current: CurrentAccount,
    coordinator: Coordinator,
    request: Request,
) -> ApiResponse:
    outcome = await coordinator.add_cart_item(current.email, body.product_name, body.quantity)
    return present(outcome, _cart_item, request, message="Added to cart")


@router.post("/cart/items/{item_id}/increment")
async def increment_cart_item(
    item_id: str,
    current: CurrentAccount,
    coordinator: Coordinator,
    request: Request,
) -> ApiResponse:
    outcome = await coordinator.increment_cart_item(current.email, item_id)
    return present(outcome, _cart_item, request)


@router.post("/cart/items/{item_id}/decrement")
async def decrement_cart_item(
    item_id: str,
    current: CurrentAccount,
    coordinator: Coordinator,
    request: Request,
) -> ApiResponse:
    outcome = await coordinator.decrement_cart_item(current.email, item_id)
    return present(outcome, _cart_item, request)


@router.delete("/cart/items/{item_id}")
async def delete_cart_item(
    item_id: str,
    current: CurrentAccount,
    coordinator: Coordinator,
    request: Request,
) -> ApiResponse:
    outcome = await coordinator.delete_cart_item(current.email, item_id)
    return present(outcome, _cart_item, request, message="Removed from cart")


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@router.post("/orders", status_code=status.HTTP_201_CREATED)
async def create_order(
    body: CreateOrderRequest,
    current: CurrentAccount,
    coordinator: Coordinator,
    request: Request,
) -> ApiResponse:
    outcome = await coordinator.create_order(
        current.email, body.order_fields(), idempotency_key=body.idempotency_key
    )
    return present(outcome, _order, request, message="Order placed")


@router.delete("/admin/orders/{order_id}")
async def delete_order(
    order_id: str,
    admin: Annotated[Account, Depends(require_admin)],
    coordinator: Coordinator,
    request: Request,
) -> ApiResponse:
    outcome = await coordinator.delete_order(order_id)
    return present(outcome, _order, request, message="Order deleted")


# ---------------------------------------------------------------------------
# Account
# ---------------------------------------------------------------------------


@router.delete("/account")
async def delete_account(
    current: CurrentAccount,
    coordinator: Coordinator,
    request: Request,
) -> ApiResponse:
    outcome = await coordinator.delete_account(current.id)
    return present(
        outcome,
        lambda a: AccountResponse.from_domain(a).model_dump(),
        request,
        message="Account deleted",
    )
