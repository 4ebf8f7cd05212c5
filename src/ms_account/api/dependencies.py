"""FastAPI dependency for the account store. Tests override it."""

from functools import lru_cache

from src.ms_account.domain.repository import AccountRepositoryProtocol
from src.ms_account.infrastructure.persistence import AccountRepository


@lru_cache
def get_account_repository() -> AccountRepositoryProtocol:
    return AccountRepository()
