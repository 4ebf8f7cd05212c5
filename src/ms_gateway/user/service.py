"""Registration and login on top of the account store."""

import logging

from src.ms_account.domain.models import Account
from src.ms_account.domain.repository import AccountRepositoryProtocol
from src.ms_common.errors import EmailExistsError, InvalidCredentialsError
from src.ms_common.id_generator import ACCOUNT_PREFIX, generate_id
from src.ms_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.ms_gateway.auth.password import hash_password, verify_password

logger = logging.getLogger(__name__)


class UserService:
    """Stateless; the account store is passed per call."""

    async def register(
        self,
        name: str,
        email: str,
        password: str,
        accounts: AccountRepositoryProtocol,
    ) -> Account:
        """Create an Account with empty listings, cart and order_refs.

        The email lookup is a fast path; the store's unique constraint is the
        final guard and raises EmailExistsError on a race.
        """
        email = email.lower()
        if await accounts.find_by_email(email) is not None:
            raise EmailExistsError()

        account = Account(
            id=generate_id(ACCOUNT_PREFIX),
            name=name,
            email=email,
            password_hash=hash_password(password),
        )
        created = await accounts.create(account)
        logger.info("Account registered: id=%s", created.id)
        return created

    async def login(
        self,
        email: str,
        password: str,
        accounts: AccountRepositoryProtocol,
    ) -> tuple[Account, str, str]:
        """Return (account, access_token, refresh_token).

        Unknown email and wrong password raise the same error.
        """
        account = await accounts.find_by_email(email.lower())
        if account is None or not verify_password(password, account.password_hash):
            raise InvalidCredentialsError()
        return account, create_access_token(account.id), create_refresh_token(account.id)

    async def refresh(self, refresh_token: str) -> str:
        payload = decode_token(refresh_token, expected_type="refresh")
        return create_access_token(str(payload["sub"]))
