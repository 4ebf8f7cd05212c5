"""Unit tests for UserService on the in-memory account store."""

import pytest

from src.ms_account.infrastructure.memory_store import InMemoryAccountRepository
from src.ms_common.errors import (
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
)
from src.ms_gateway.auth.jwt_handler import create_access_token, decode_token
from src.ms_gateway.user.service import UserService


@pytest.fixture
def service() -> UserService:
    return UserService()


class TestRegister:
    async def test_creates_empty_account(
        self, service: UserService, accounts: InMemoryAccountRepository
    ) -> None:
        account = await service.register("Ann", "Ann@Example.com", "secret123", accounts)

        assert account.id.startswith("acc_")
        assert account.email == "ann@example.com"
        assert account.password_hash != "secret123"
        assert (account.listings, account.cart, account.order_refs) == ([], [], [])
        assert account.id in accounts.records

    async def test_duplicate_email(
        self, service: UserService, accounts: InMemoryAccountRepository
    ) -> None:
        await service.register("Ann", "ann@example.com", "secret123", accounts)
        with pytest.raises(EmailExistsError):
            await service.register("Other", "ANN@example.com", "secret123", accounts)


class TestLogin:
    async def test_returns_tokens_for_account(
        self, service: UserService, accounts: InMemoryAccountRepository
    ) -> None:
        created = await service.register("Ann", "ann@example.com", "secret123", accounts)

        account, access, refresh = await service.login("ann@example.com", "secret123", accounts)

        assert account.id == created.id
        assert decode_token(access, "access")["sub"] == created.id
        assert decode_token(refresh, "refresh")["sub"] == created.id

    async def test_wrong_password_and_unknown_email_look_the_same(
        self, service: UserService, accounts: InMemoryAccountRepository
    ) -> None:
        await service.register("Ann", "ann@example.com", "secret123", accounts)
        with pytest.raises(InvalidCredentialsError):
            await service.login("ann@example.com", "wrong1234", accounts)
        with pytest.raises(InvalidCredentialsError):
            await service.login("nobody@example.com", "secret123", accounts)


class TestRefresh:
    async def test_issues_new_access_token(
        self, service: UserService, accounts: InMemoryAccountRepository
    ) -> None:
        await service.register("Ann", "ann@example.com", "secret123", accounts)
        _, _, refresh = await service.login("ann@example.com", "secret123", accounts)

        access = await service.refresh(refresh)
        assert decode_token(access, "access")["type"] == "access"

    async def test_rejects_access_token(self, service: UserService) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(create_access_token("acc_1"))
