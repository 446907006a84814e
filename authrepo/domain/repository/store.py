"""Document store interface.

The storage engine behind the repository: named collections of records
with lookup by equality criteria or by key, and (unique) secondary indexes.
Collections come into existence on first write or on ``ensure_index``.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


@dataclass(frozen=True)
class CollectionSpec(Generic[T]):
    """Describes one collection.

    Attributes:
        name: Collection name
        model: Record type stored in the collection
        key: Field holding the primary key
        auto_key: Whether the store assigns integer keys to records
            inserted with an unset key
    """

    name: str
    model: type[T]
    key: str = "id"
    auto_key: bool = False


class DocumentCollection(ABC, Generic[T]):
    """Typed access to one collection.

    Criteria are equality matches on record fields; a None criterion
    matches records where the field is unset.
    """

    @property
    @abstractmethod
    def spec(self) -> CollectionSpec[T]:
        """The collection's description."""
        pass

    @abstractmethod
    async def find(self, **criteria: Any) -> list[T]:
        """Find all records matching the criteria.

        Args:
            **criteria: Field equality criteria

        Returns:
            Matching records (may be empty)
        """
        pass

    async def find_one(self, **criteria: Any) -> T | None:
        """Find the first record matching the criteria.

        Args:
            **criteria: Field equality criteria

        Returns:
            The record if found, None otherwise
        """
        records = await self.find(**criteria)
        return records[0] if records else None

    @abstractmethod
    async def find_by_key(self, key: Any) -> T | None:
        """Find a record by primary key.

        Args:
            key: Primary key value

        Returns:
            The record if found, None otherwise
        """
        pass

    @abstractmethod
    async def insert(self, document: T) -> T:
        """Insert a record.

        Args:
            document: Record to insert

        Returns:
            The stored record, with its key assigned if it had none

        Raises:
            DuplicateKeyError: If the key or a unique index value is taken
        """
        pass

    @abstractmethod
    async def update(self, document: T) -> bool:
        """Replace the record with the same key.

        Args:
            document: Record to store

        Returns:
            True if a record was replaced, False if none had the key

        Raises:
            DuplicateKeyError: If a unique index value is taken
        """
        pass

    @abstractmethod
    async def delete(self, **criteria: Any) -> int:
        """Delete all records matching the criteria.

        Args:
            **criteria: Field equality criteria

        Returns:
            Number of records deleted
        """
        pass

    @abstractmethod
    async def count(self, **criteria: Any) -> int:
        """Count records matching the criteria."""
        pass

    @abstractmethod
    async def ensure_index(self, *fields: str, unique: bool = False) -> None:
        """Create an index over the fields if it does not exist yet.

        Also creates the collection itself when missing.

        Args:
            *fields: Indexed fields, in order
            unique: Whether set values must be unique across records.
                Records with any indexed field unset are not constrained.
        """
        pass


class DocumentStore(ABC):
    """A set of named collections."""

    @abstractmethod
    def collection(self, spec: CollectionSpec[T]) -> DocumentCollection[T]:
        """Get a handle on a collection.

        Handles stay valid when the collection is dropped and recreated.

        Args:
            spec: Collection description

        Returns:
            Collection handle
        """
        pass

    @abstractmethod
    async def list_collection_names(self) -> list[str]:
        """Names of all existing collections."""
        pass

    @abstractmethod
    async def drop_collection(self, name: str) -> None:
        """Drop a collection with all its records and indexes.

        Dropping a missing collection is a no-op.
        """
        pass
