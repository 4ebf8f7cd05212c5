"""Account repository Protocol — the Account Store contract.

``save`` is a full-document replace guarded by ``account.version``: it either
persists the whole embedded-list state or nothing, and raises
ConcurrentModificationError when the stored version moved since the read.
Unit tests inject an in-memory implementation that conforms to this Protocol.
"""

from typing import Protocol

from src.ms_account.domain.models import Account


class AccountRepositoryProtocol(Protocol):
    async def create(self, account: Account) -> Account: ...

    async def get(self, account_id: str) -> Account | None: ...

    async def find_by_email(self, email: str) -> Account | None: ...

    async def save(self, account: Account) -> Account: ...

    async def delete(self, account_id: str) -> Account | None: ...

    async def list_all(self) -> list[Account]: ...
