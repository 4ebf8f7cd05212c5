"""FastAPI dependencies: get_current_account, require_admin, plus the is_admin check.

Usage in a protected router:
    @router.get("/me")
    async def me(account: Annotated[Account, Depends(get_current_account)]):
        ...
"""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from config.settings import settings
from src.ms_account.api.dependencies import get_account_repository
from src.ms_account.domain.models import Account
from src.ms_account.domain.repository import AccountRepositoryProtocol
from src.ms_common.errors import AdminRequiredError, InvalidCredentialsError
from src.ms_gateway.auth.jwt_handler import decode_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_account(
    token: Annotated[str, Depends(oauth2_scheme)],
    accounts: Annotated[AccountRepositoryProtocol, Depends(get_account_repository)],
) -> Account:
    """Resolve the Bearer token to the caller's Account, or 401."""
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    account_id = payload.get("sub")
    if not account_id:
        raise _CREDENTIALS_EXCEPTION

    account = await accounts.get(account_id)
    if account is None:
        raise _CREDENTIALS_EXCEPTION
    return account


def is_admin(account: Account) -> bool:
    admins = {email.lower() for email in settings.ADMIN_EMAILS}
    return account.email.lower() in admins


async def require_admin(
    current: Annotated[Account, Depends(get_current_account)],
) -> Account:
    """Only accounts whose email is listed in ADMIN_EMAILS pass."""
    if not is_admin(current):
        raise AdminRequiredError()
    return current
