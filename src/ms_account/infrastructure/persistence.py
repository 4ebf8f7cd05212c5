"""AccountRepository — PostgreSQL implementation of AccountRepositoryProtocol.

The embedded sequences live in JSONB columns of the single accounts row, so
one UPDATE persists all of them or none of them.

Concurrency: optimistic. ``save`` only matches the row when ``version`` still
equals the version that was read, and bumps it. Zero rows on a row that still
exists means another writer got there first → ConcurrentModificationError.
Silent last-writer-wins on the embedded lists is never allowed.
"""

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.ms_account.domain.models import (
    Account,
    cart_from_json,
    cart_to_json,
    listings_from_json,
    listings_to_json,
)
from src.ms_common import jsonb
from src.ms_common.database import async_session_factory
from src.ms_common.errors import (
    AccountNotFoundError,
    ConcurrentModificationError,
    EmailExistsError,
)

_COLUMNS = """
    id, name, email, password_hash, listings, cart, order_refs,
    version, created_at, updated_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO accounts (id, name, email, password_hash, listings, cart, order_refs, version)
    VALUES (:id, :name, :email, :password_hash,
            CAST(:listings AS JSONB), CAST(:cart AS JSONB), CAST(:order_refs AS JSONB), 0)
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM accounts
    WHERE id = :id
""")

_GET_BY_EMAIL_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM accounts
    WHERE email = :email
""")

_SAVE_SQL = text(f"""
    UPDATE accounts
    SET name = :name,
        email = :email,
        password_hash = :password_hash,
        listings = CAST(:listings AS JSONB),
        cart = CAST(:cart AS JSONB),
        order_refs = CAST(:order_refs AS JSONB),
        version = version + 1,
        updated_at = NOW()
    WHERE id = :id AND version = :version
    RETURNING {_COLUMNS}
""")

_EXISTS_SQL = text("SELECT 1 FROM accounts WHERE id = :id")

_DELETE_SQL = text(f"""
    DELETE FROM accounts
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_LIST_ALL_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM accounts
    ORDER BY created_at, id
""")


def _row_to_account(row: object) -> Account:
    return Account(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        email=row.email,  # type: ignore[attr-defined]
        password_hash=row.password_hash,  # type: ignore[attr-defined]
        listings=listings_from_json(jsonb.loads(row.listings)),  # type: ignore[attr-defined]
        cart=cart_from_json(jsonb.loads(row.cart)),  # type: ignore[attr-defined]
        order_refs=list(jsonb.loads(row.order_refs) or []),  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _document_params(account: Account) -> dict[str, object]:
    return {
        "id": account.id,
        "name": account.name,
        "email": account.email,
        "password_hash": account.password_hash,
        "listings": jsonb.dumps(listings_to_json(account.listings)),
        "cart": jsonb.dumps(cart_to_json(account.cart)),
        "order_refs": jsonb.dumps(account.order_refs),
    }


class AccountRepository:
    """Concrete repository — one committed statement per call."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession] | None = None
    ) -> None:
        self._session_factory = session_factory or async_session_factory

    async def create(self, account: Account) -> Account:
        async with self._session_factory() as db:
            try:
                result = await db.execute(_INSERT_SQL, _document_params(account))
                row = result.fetchone()
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                raise EmailExistsError() from exc
        return _row_to_account(row)

    async def get(self, account_id: str) -> Account | None:
        async with self._session_factory() as db:
            result = await db.execute(_GET_SQL, {"id": account_id})
            row = result.fetchone()
        return _row_to_account(row) if row is not None else None

    async def find_by_email(self, email: str) -> Account | None:
        async with self._session_factory() as db:
            result = await db.execute(_GET_BY_EMAIL_SQL, {"email": email})
            row = result.fetchone()
        return _row_to_account(row) if row is not None else None

    async def save(self, account: Account) -> Account:
        async with self._session_factory() as db:
            result = await db.execute(
                _SAVE_SQL, {**_document_params(account), "version": account.version}
            )
            row = result.fetchone()
            if row is None:
                await db.rollback()
                exists = (await db.execute(_EXISTS_SQL, {"id": account.id})).fetchone()
                if exists is None:
                    raise AccountNotFoundError(account.id)
                raise ConcurrentModificationError(account.id, account.version)
            await db.commit()
        return _row_to_account(row)

    async def delete(self, account_id: str) -> Account | None:
        async with self._session_factory() as db:
            result = await db.execute(_DELETE_SQL, {"id": account_id})
            row = result.fetchone()
            await db.commit()
        return _row_to_account(row) if row is not None else None

    async def list_all(self) -> list[Account]:
        async with self._session_factory() as db:
            result = await db.execute(_LIST_ALL_SQL)
            rows = result.fetchall()
        return [_row_to_account(r) for r in rows]
