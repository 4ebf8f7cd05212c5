"""In-memory account store (useful for tests and local runs).

Applies the same optimistic version check as the PostgreSQL store, and
yields to the event loop on every call like a network round trip would, so
concurrent read-modify-write sequences really interleave.
"""

import asyncio
import copy

from src.ms_account.domain.models import Account
from src.ms_common.datetime_utils import utc_now
from src.ms_common.errors import (
    AccountNotFoundError,
    ConcurrentModificationError,
    EmailExistsError,
)


class InMemoryAccountRepository:
    def __init__(self) -> None:
        self.records: dict[str, Account] = {}

    async def create(self, account: Account) -> Account:
        await asyncio.sleep(0)
        if any(a.email == account.email for a in self.records.values()):
            raise EmailExistsError()
        now = utc_now()
        stored = copy.deepcopy(account)
        stored.version = 0
        stored.created_at = now
        stored.updated_at = now
        self.records[stored.id] = stored
        return copy.deepcopy(stored)

    async def get(self, account_id: str) -> Account | None:
        await asyncio.sleep(0)
        found = self.records.get(account_id)
        return copy.deepcopy(found) if found is not None else None

    async def find_by_email(self, email: str) -> Account | None:
        await asyncio.sleep(0)
        for account in self.records.values():
            if account.email == email:
                return copy.deepcopy(account)
        return None

    async def save(self, account: Account) -> Account:
        await asyncio.sleep(0)
        current = self.records.get(account.id)
        if current is None:
            raise AccountNotFoundError(account.id)
        if current.version != account.version:
            raise ConcurrentModificationError(account.id, account.version)
        stored = copy.deepcopy(account)
        stored.version = current.version + 1
        stored.created_at = current.created_at
        stored.updated_at = utc_now()
        self.records[stored.id] = stored
        return copy.deepcopy(stored)

    async def delete(self, account_id: str) -> Account | None:
        await asyncio.sleep(0)
        return self.records.pop(account_id, None)

    async def list_all(self) -> list[Account]:
        await asyncio.sleep(0)
        return [copy.deepcopy(a) for a in self.records.values()]
