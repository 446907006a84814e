"""SQL document store.

Implements the document store interface with SQLAlchemy async Core over the
declared tables, by default on an embedded SQLite file. Each operation runs
in its own short transaction. Unique indexes are real database indexes, so
concurrent writers racing for the same user name cannot both win.
"""

from collections.abc import Mapping
from typing import Any

import logfire
from sqlalchemy import Index, Table, func, inspect, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from authrepo.domain.error import DuplicateKeyError
from authrepo.domain.repository.store import (
    CollectionSpec,
    DocumentCollection,
    DocumentStore,
    T,
)
from authrepo.persistence.mappers import record_to_row, row_to_record
from authrepo.persistence.tables import TABLES


class SqlCollection(DocumentCollection[T]):
    """SQL implementation of DocumentCollection over one table."""

    def __init__(self, engine: AsyncEngine, spec: CollectionSpec[T], table: Table) -> None:
        self._engine = engine
        self._spec = spec
        self._table = table
        self._created = False

    @property
    def spec(self) -> CollectionSpec[T]:
        return self._spec

    def forget_created(self) -> None:
        """Make the next write check for the table again (after a drop)."""
        self._created = False

    async def find(self, **criteria: Any) -> list[T]:
        stmt = select(self._table).where(*self._where(criteria))
        async with self._engine.connect() as conn:
            result = await conn.execute(stmt)
            rows = result.mappings().all()

        return [row_to_record(self._spec.model, row) for row in rows]

    async def find_by_key(self, key: Any) -> T | None:
        if key is None:
            return None
        records = await self.find(**{self._spec.key: key})
        return records[0] if records else None

    async def insert(self, document: T) -> T:
        values = record_to_row(document, self._table)
        if values.get(self._spec.key) is None:
            if not self._spec.auto_key:
                raise ValueError(
                    f"Records in {self._spec.name} need a {self._spec.key} to be inserted"
                )
            del values[self._spec.key]

        try:
            async with self._engine.begin() as conn:
                await self._ensure_table(conn)
                result = await conn.execute(self._table.insert().values(**values))
        except IntegrityError as e:
            raise await self._duplicate_key_error(values) from e

        if self._spec.key not in values:
            document = document.model_copy(
                update={self._spec.key: result.inserted_primary_key[0]}
            )
        return document

    async def update(self, document: T) -> bool:
        values = record_to_row(document, self._table)
        key = values.pop(self._spec.key)
        if key is None:
            return False

        key_column = self._table.c[self._spec.key]
        try:
            async with self._engine.begin() as conn:
                await self._ensure_table(conn)
                result = await conn.execute(
                    self._table.update().where(key_column == key).values(**values)
                )
        except IntegrityError as e:
            raise await self._duplicate_key_error(values, updated_key=key) from e

        return result.rowcount > 0

    async def delete(self, **criteria: Any) -> int:
        stmt = self._table.delete().where(*self._where(criteria))
        async with self._engine.begin() as conn:
            await self._ensure_table(conn)
            result = await conn.execute(stmt)
        return result.rowcount

    async def count(self, **criteria: Any) -> int:
        stmt = select(func.count()).select_from(self._table).where(*self._where(criteria))
        async with self._engine.connect() as conn:
            result = await conn.execute(stmt)
            return result.scalar_one()

    async def ensure_index(self, *fields: str, unique: bool = False) -> None:
        index = self._declared_index(fields, unique)
        async with self._engine.begin() as conn:
            await self._ensure_table(conn)
            await conn.run_sync(index.create, checkfirst=True)

    def _where(self, criteria: Mapping[str, Any]) -> list[Any]:
        clauses = []
        for field, value in criteria.items():
            if field not in self._table.c:
                raise ValueError(f"Unknown fields for {self._spec.name}: ['{field}']")
            column = self._table.c[field]
            clauses.append(column.is_(None) if value is None else column == value)
        return clauses

    def _declared_index(self, fields: tuple[str, ...], unique: bool) -> Index:
        for index in self._table.indexes:
            columns = tuple(column.name for column in index.columns)
            if columns == tuple(fields) and bool(index.unique) == unique:
                return index
        raise ValueError(
            f"No {'unique ' if unique else ''}index on {list(fields)} "
            f"declared for {self._spec.name}"
        )

    async def _ensure_table(self, conn: AsyncConnection) -> None:
        if self._created:
            return
        # Creating the table also creates its declared indexes
        await conn.run_sync(self._table.create, checkfirst=True)
        self._created = True

    async def _duplicate_key_error(
        self, values: Mapping[str, Any], updated_key: Any = None
    ) -> DuplicateKeyError:
        """Work out which unique index a failed write collided with.

        Args:
            values: Column values of the failed write
            updated_key: Key of the record being updated, None for inserts
        """
        key_column = self._table.c[self._spec.key]
        candidates: list[tuple[str, ...]] = []
        if updated_key is None:
            candidates.append((self._spec.key,))
        candidates.extend(
            tuple(column.name for column in index.columns)
            for index in self._table.indexes
            if index.unique
        )

        async with self._engine.connect() as conn:
            for fields in candidates:
                if any(values.get(field) is None for field in fields):
                    continue
                stmt = select(func.count()).select_from(self._table).where(
                    *(self._table.c[field] == values[field] for field in fields)
                )
                if updated_key is not None:
                    stmt = stmt.where(key_column != updated_key)
                result = await conn.execute(stmt)
                if result.scalar_one() > 0:
                    return DuplicateKeyError(self._spec.name, fields)

        logfire.warn(
            "Integrity error without a matching unique index",
            collection=self._spec.name,
        )
        return DuplicateKeyError(self._spec.name, ())


class SqlDocumentStore(DocumentStore):
    """SQL implementation of DocumentStore.

    Only collections with a declared table can be used.
    """

    def __init__(self, engine: AsyncEngine, tables: Mapping[str, Table] | None = None) -> None:
        """Initialize store with a database engine.

        Args:
            engine: SQLAlchemy async engine
            tables: Collection name -> table, defaults to the auth tables
        """
        self.engine = engine
        self._tables = dict(tables if tables is not None else TABLES)
        self._collections: dict[str, SqlCollection[Any]] = {}

    def collection(self, spec: CollectionSpec[T]) -> SqlCollection[T]:
        collection = self._collections.get(spec.name)
        if collection is None:
            table = self._tables.get(spec.name)
            if table is None:
                raise ValueError(f"No table declared for collection {spec.name}")
            collection = self._collections[spec.name] = SqlCollection(
                self.engine, spec, table
            )
        return collection

    async def list_collection_names(self) -> list[str]:
        async with self.engine.connect() as conn:
            return await conn.run_sync(
                lambda sync_conn: inspect(sync_conn).get_table_names()
            )

    async def drop_collection(self, name: str) -> None:
        table = self._tables.get(name)
        if table is None:
            return

        async with self.engine.begin() as conn:
            await conn.run_sync(table.drop, checkfirst=True)

        collection = self._collections.get(name)
        if collection is not None:
            collection.forget_created()
        logfire.info("Collection dropped", collection=name)
