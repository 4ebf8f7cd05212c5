"""Account read API."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.ms_account.application.schemas import AccountResponse
from src.ms_account.domain.models import Account
from src.ms_common.response import ApiResponse, success_response
from src.ms_gateway.auth.dependencies import get_current_account

router = APIRouter(prefix="/account", tags=["account"])


@router.get("/me")
async def get_me(
    current: Annotated[Account, Depends(get_current_account)],
    request: Request,
) -> ApiResponse:
    resp = success_response(AccountResponse.from_domain(current).model_dump())
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp
