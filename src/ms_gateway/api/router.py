"""Auth API router: register, login, refresh."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from config.settings import settings
from src.ms_account.api.dependencies import get_account_repository
from src.ms_account.domain.repository import AccountRepositoryProtocol
from src.ms_common.datetime_utils import iso_or_empty
from src.ms_common.response import ApiResponse, success_response
from src.ms_gateway.user.schemas import (
    AccountInfo,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
)
from src.ms_gateway.user.service import UserService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()


def _get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "req_unknown")


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=ApiResponse)
async def register(
    request: Request,
    body: RegisterRequest,
    accounts: Annotated[AccountRepositoryProtocol, Depends(get_account_repository)],
) -> ApiResponse:
    account = await _service.register(body.name, body.email, body.password, accounts)
    data = RegisterResponse(
        account_id=account.id,
        name=account.name,
        email=account.email,
        created_at=iso_or_empty(account.created_at),
    )
    resp = success_response(data.model_dump(), message="Account registered successfully")
    resp.request_id = _get_request_id(request)
    return resp


@router.post("/login", response_model=ApiResponse)
async def login(
    request: Request,
    body: LoginRequest,
    accounts: Annotated[AccountRepositoryProtocol, Depends(get_account_repository)],
) -> ApiResponse:
    account, access_token, refresh_token = await _service.login(
        body.email, body.password, accounts
    )
    data = LoginResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
        account=AccountInfo(account_id=account.id, name=account.name, email=account.email),
    )
    resp = success_response(data.model_dump(), message="Login successful")
    resp.request_id = _get_request_id(request)
    return resp


@router.post("/refresh", response_model=ApiResponse)
async def refresh_token(request: Request, body: RefreshRequest) -> ApiResponse:
    data = RefreshResponse(
        access_token=await _service.refresh(body.refresh_token),
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    )
    resp = success_response(data.model_dump(), message="Token refreshed")
    resp.request_id = _get_request_id(request)
    return resp
