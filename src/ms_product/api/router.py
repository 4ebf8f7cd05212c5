"""Product read API — single-collection lookups, no account coordination."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.ms_common.errors import ProductNotFoundError
from src.ms_common.response import ApiResponse, success_response
from src.ms_product.api.dependencies import get_product_repository
from src.ms_product.application.schemas import ProductListResponse, ProductResponse
from src.ms_product.domain.repository import ProductRepositoryProtocol

router = APIRouter(prefix="/products", tags=["products"])


@router.get("")
async def list_products(
    products: Annotated[ProductRepositoryProtocol, Depends(get_product_repository)],
    request: Request,
    owner_id: str | None = Query(None, description="Only products listed by this account"),
) -> ApiResponse:
    found = (
        await products.list_by_owner(owner_id)
        if owner_id is not None
        else await products.list_all()
    )
    data = ProductListResponse(
        items=[ProductResponse.from_domain(p) for p in found], total=len(found)
    )
    resp = success_response(data.model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.get("/{product_id}")
async def get_product(
    product_id: str,
    products: Annotated[ProductRepositoryProtocol, Depends(get_product_repository)],
    request: Request,
) -> ApiResponse:
    product = await products.get(product_id)
    if product is None:
        raise ProductNotFoundError(product_id)
    resp = success_response(ProductResponse.from_domain(product).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
