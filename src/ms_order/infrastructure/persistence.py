"""OrderRepository — PostgreSQL implementation of OrderRepositoryProtocol.

purchased_items and billing_info are JSONB snapshots. Each public method runs
in its own session and commits before returning.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.ms_common import jsonb
from src.ms_common.database import async_session_factory
from src.ms_order.domain.models import (
    Order,
    billing_from_json,
    billing_to_json,
    items_from_json,
    items_to_json,
)

_COLUMNS = """
    id, owner_id, customer_email, total_price, timestamp,
    purchased_items, billing_info, created_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO orders
        (id, owner_id, customer_email, total_price, timestamp,
         purchased_items, billing_info)
    VALUES
        (:id, :owner_id, :customer_email, :total_price, :timestamp,
         CAST(:purchased_items AS JSONB), CAST(:billing_info AS JSONB))
    RETURNING {_COLUMNS}
""")

_GET_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM orders
    WHERE id = :id
""")

_DELETE_SQL = text(f"""
    DELETE FROM orders
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_LIST_BY_EMAIL_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM orders
    WHERE customer_email = :customer_email
    ORDER BY timestamp DESC, id DESC
""")

_LIST_BY_OWNER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM orders
    WHERE owner_id = :owner_id
    ORDER BY timestamp DESC, id DESC
""")

_LIST_ALL_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM orders
    ORDER BY timestamp, id
""")


def _row_to_order(row: object) -> Order:
    return Order(
        id=row.id,  # type: ignore[attr-defined]
        owner_id=row.owner_id,  # type: ignore[attr-defined]
        customer_email=row.customer_email,  # type: ignore[attr-defined]
        total_price=row.total_price,  # type: ignore[attr-defined]
        timestamp=row.timestamp,  # type: ignore[attr-defined]
        purchased_items=items_from_json(jsonb.loads(row.purchased_items)),  # type: ignore[attr-defined]
        billing_info=billing_from_json(jsonb.loads(row.billing_info)),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class OrderRepository:
    """Concrete repository — orders are insert-once, delete-only."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession] | None = None
    ) -> None:
        self._session_factory = session_factory or async_session_factory

    async def create(self, order: Order) -> str:
        async with self._session_factory() as db:
            result = await db.execute(
                _INSERT_SQL,
                {
                    "id": order.id,
                    "owner_id": order.owner_id,
                    "customer_email": order.customer_email,
                    "total_price": order.total_price,
                    "timestamp": order.timestamp,
                    "purchased_items": jsonb.dumps(items_to_json(order.purchased_items)),
                    "billing_info": jsonb.dumps(billing_to_json(order.billing_info)),
                },
            )
            row = result.fetchone()
            await db.commit()
        order.created_at = row.created_at  # type: ignore[union-attr]
        return order.id

    async def get(self, order_id: str) -> Order | None:
        async with self._session_factory() as db:
            result = await db.execute(_GET_SQL, {"id": order_id})
            row = result.fetchone()
        return _row_to_order(row) if row is not None else None

    async def delete(self, order_id: str) -> Order | None:
        async with self._session_factory() as db:
            result = await db.execute(_DELETE_SQL, {"id": order_id})
            row = result.fetchone()
            await db.commit()
        return _row_to_order(row) if row is not None else None

    async def list_by_customer_email(self, customer_email: str) -> list[Order]:
        async with self._session_factory() as db:
            result = await db.execute(_LIST_BY_EMAIL_SQL, {"customer_email": customer_email})
            rows = result.fetchall()
        return [_row_to_order(r) for r in rows]

    async def list_by_owner(self, owner_id: str) -> list[Order]:
        async with self._session_factory() as db:
            result = await db.execute(_LIST_BY_OWNER_SQL, {"owner_id": owner_id})
            rows = result.fetchall()
        return [_row_to_order(r) for r in rows]

    async def list_all(self) -> list[Order]:
        async with self._session_factory() as db:
            result = await db.execute(_LIST_ALL_SQL)
            rows = result.fetchall()
        return [_row_to_order(r) for r in rows]
