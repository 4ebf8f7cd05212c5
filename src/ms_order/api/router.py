"""Order read API. Writes go through the sync router.

Callers see their own orders; administrators may read any customer's.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.ms_account.domain.models import Account
from src.ms_common.errors import AdminRequiredError, OrderNotFoundError
from src.ms_common.response import ApiResponse, success_response
from src.ms_gateway.auth.dependencies import get_current_account, is_admin
from src.ms_order.api.dependencies import get_order_repository
from src.ms_order.application.schemas import OrderListResponse, OrderResponse
from src.ms_order.domain.repository import OrderRepositoryProtocol

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("")
async def list_orders(
    current: Annotated[Account, Depends(get_current_account)],
    orders: Annotated[OrderRepositoryProtocol, Depends(get_order_repository)],
    request: Request,
    customer_email: str | None = Query(None, description="Defaults to the caller's email"),
) -> ApiResponse:
    email = customer_email or current.email
    if email.lower() != current.email.lower() and not is_admin(current):
        raise AdminRequiredError()
    found = await orders.list_by_customer_email(email)
    data = OrderListResponse(
        items=[OrderResponse.from_domain(o) for o in found], total=len(found)
    )
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{order_id}")
async def get_order(
    order_id: str,
    current: Annotated[Account, Depends(get_current_account)],
    orders: Annotated[OrderRepositoryProtocol, Depends(get_order_repository)],
    request: Request,
) -> ApiResponse:
    order = await orders.get(order_id)
    # Another customer's order reads as missing.
    if order is None or (order.owner_id != current.id and not is_admin(current)):
        raise OrderNotFoundError(order_id)
    resp = success_response(OrderResponse.from_domain(order).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
