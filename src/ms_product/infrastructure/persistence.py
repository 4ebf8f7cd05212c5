"""ProductRepository — PostgreSQL implementation of ProductRepositoryProtocol.

All queries use raw text() SQL. Each public method opens its own session and
commits before returning: a product write never shares a transaction with an
account write.

Name uniqueness: the SELECT-before-INSERT check is best effort; the
uq_products_name constraint is the final guard and its IntegrityError is
mapped to DuplicateNameError.
"""

from typing import Any

from sqlalchemy import TextClause, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.ms_common.database import async_session_factory
from src.ms_common.errors import DuplicateNameError
from src.ms_product.domain.models import LOOKUP_FIELDS, Product, validate_patch

_COLUMNS = """
    id, name, price, number_in_stock, owner_id,
    description, image_url, genre, created_at, updated_at
"""

_INSERT_SQL = text(f"""
    INSERT INTO products
        (id, name, price, number_in_stock, owner_id, description, image_url, genre)
    VALUES
        (:id, :name, :price, :number_in_stock, :owner_id, :description, :image_url, :genre)
    RETURNING {_COLUMNS}
""")

_DELETE_SQL = text(f"""
    DELETE FROM products
    WHERE id = :id
    RETURNING {_COLUMNS}
""")

_LIST_BY_OWNER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM products
    WHERE owner_id = :owner_id
    ORDER BY created_at, id
""")

_LIST_ALL_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM products
    ORDER BY created_at, id
""")

# One prepared statement per lookup field; the field name never reaches SQL
# from caller input.
_FIND_BY_SQL = {
    field: text(f"SELECT {_COLUMNS} FROM products WHERE {field} = :value LIMIT 1")
    for field in LOOKUP_FIELDS
}

_UNIQUE_NAME_CONSTRAINT = "uq_products_name"


def _row_to_product(row: object) -> Product:
    return Product(
        id=row.id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        price=row.price,  # type: ignore[attr-defined]
        number_in_stock=row.number_in_stock,  # type: ignore[attr-defined]
        owner_id=row.owner_id,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        image_url=row.image_url,  # type: ignore[attr-defined]
        genre=row.genre,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _build_update_sql(fields: list[str]) -> TextClause:
    assignments = ", ".join(f"{field} = :{field}" for field in fields)
    return text(f"""
        UPDATE products
        SET {assignments}, updated_at = NOW()
        WHERE id = :id
        RETURNING {_COLUMNS}
    """)


class ProductRepository:
    """Concrete repository — each call is one committed statement."""

    def __init__(
        self, session_factory: async_sessionmaker[AsyncSession] | None = None
    ) -> None:
        self._session_factory = session_factory or async_session_factory

    async def create(self, product: Product) -> str:
        if await self.find_by_field("name", product.name) is not None:
            raise DuplicateNameError(product.name)
        async with self._session_factory() as db:
            try:
                result = await db.execute(
                    _INSERT_SQL,
                    {
                        "id": product.id,
                        "name": product.name,
                        "price": product.price,
                        "number_in_stock": product.number_in_stock,
                        "owner_id": product.owner_id,
                        "description": product.description,
                        "image_url": product.image_url,
                        "genre": product.genre,
                    },
                )
                row = result.fetchone()
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                if _UNIQUE_NAME_CONSTRAINT in str(exc.orig):
                    raise DuplicateNameError(product.name) from exc
                raise
        created = _row_to_product(row)
        product.created_at = created.created_at
        product.updated_at = created.updated_at
        return created.id

    async def get(self, product_id: str) -> Product | None:
        return await self.find_by_field("id", product_id)

    async def update(self, product_id: str, patch: dict[str, Any]) -> Product | None:
        fields = sorted(validate_patch(patch))
        if not fields:
            return await self.get(product_id)
        if "name" in patch:
            holder = await self.find_by_field("name", patch["name"])
            if holder is not None and holder.id != product_id:
                raise DuplicateNameError(patch["name"])
        async with self._session_factory() as db:
            try:
                result = await db.execute(
                    _build_update_sql(fields), {**patch, "id": product_id}
                )
                row = result.fetchone()
                await db.commit()
            except IntegrityError as exc:
                await db.rollback()
                if _UNIQUE_NAME_CONSTRAINT in str(exc.orig):
                    raise DuplicateNameError(str(patch.get("name"))) from exc
                raise
        return _row_to_product(row) if row is not None else None

    async def delete(self, product_id: str) -> Product | None:
        async with self._session_factory() as db:
            result = await db.execute(_DELETE_SQL, {"id": product_id})
            row = result.fetchone()
            await db.commit()
        return _row_to_product(row) if row is not None else None

    async def find_by_field(self, field: str, value: Any) -> Product | None:
        if field not in _FIND_BY_SQL:
            raise ValueError(f"Products cannot be looked up by {field!r}")
        async with self._session_factory() as db:
            result = await db.execute(_FIND_BY_SQL[field], {"value": value})
            row = result.fetchone()
        return _row_to_product(row) if row is not None else None

    async def list_by_owner(self, owner_id: str) -> list[Product]:
        async with self._session_factory() as db:
            result = await db.execute(_LIST_BY_OWNER_SQL, {"owner_id": owner_id})
            rows = result.fetchall()
        return [_row_to_product(r) for r in rows]

    async def list_all(self) -> list[Product]:
        async with self._session_factory() as db:
            result = await db.execute(_LIST_ALL_SQL)
            rows = result.fetchall()
        return [_row_to_product(r) for r in rows]
