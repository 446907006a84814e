"""In-memory document store.

Used by tests and for throwaway repositories. Unique indexes are enforced
and integer keys are assigned from a per-collection counter.
"""

from typing import Any

from authrepo.domain.error import DuplicateKeyError
from authrepo.domain.repository.store import (
    CollectionSpec,
    DocumentCollection,
    DocumentStore,
    T,
)


def _matches(document: Any, criteria: dict[str, Any]) -> bool:
    return all(getattr(document, field) == value for field, value in criteria.items())


class InMemoryCollection(DocumentCollection[T]):
    """In-memory implementation of DocumentCollection."""

    def __init__(self, spec: CollectionSpec[T]) -> None:
        self._spec = spec
        self.reset()

    @property
    def spec(self) -> CollectionSpec[T]:
        return self._spec

    @property
    def exists(self) -> bool:
        """Whether the collection has been created."""
        return self._exists

    def reset(self) -> None:
        """Forget all records and indexes."""
        self._documents: dict[Any, T] = {}
        self._indexes: set[tuple[tuple[str, ...], bool]] = set()
        self._next_key = 1
        self._exists = False

    async def find(self, **criteria: Any) -> list[T]:
        self._check_fields(criteria)
        return [
            document.model_copy(deep=True)
            for document in self._documents.values()
            if _matches(document, criteria)
        ]

    async def find_by_key(self, key: Any) -> T | None:
        document = self._documents.get(key)
        return document.model_copy(deep=True) if document is not None else None

    async def insert(self, document: T) -> T:
        key = getattr(document, self._spec.key)
        if key is None:
            if not self._spec.auto_key:
                raise ValueError(
                    f"Records in {self._spec.name} need a {self._spec.key} to be inserted"
                )
            key = self._next_key
            document = document.model_copy(update={self._spec.key: key})
        elif key in self._documents:
            raise DuplicateKeyError(self._spec.name, (self._spec.key,))

        self._check_unique(document, key)
        self._documents[key] = document.model_copy(deep=True)
        if isinstance(key, int) and key >= self._next_key:
            self._next_key = key + 1
        self._exists = True
        return document

    async def update(self, document: T) -> bool:
        key = getattr(document, self._spec.key)
        if key is None or key not in self._documents:
            return False

        self._check_unique(document, key)
        self._documents[key] = document.model_copy(deep=True)
        return True

    async def delete(self, **criteria: Any) -> int:
        self._check_fields(criteria)
        keys = [key for key, document in self._documents.items() if _matches(document, criteria)]
        for key in keys:
            del self._documents[key]
        return len(keys)

    async def count(self, **criteria: Any) -> int:
        self._check_fields(criteria)
        return sum(1 for document in self._documents.values() if _matches(document, criteria))

    async def ensure_index(self, *fields: str, unique: bool = False) -> None:
        if not fields:
            raise ValueError("An index needs at least one field")
        self._check_fields(dict.fromkeys(fields))
        self._indexes.add((tuple(fields), unique))
        self._exists = True

    def _check_fields(self, criteria: dict[str, Any]) -> None:
        unknown = set(criteria) - set(self._spec.model.model_fields)
        if unknown:
            raise ValueError(f"Unknown fields for {self._spec.name}: {sorted(unknown)}")

    def _check_unique(self, document: T, key: Any) -> None:
        for fields, unique in sorted(self._indexes):
            if not unique:
                continue
            values = tuple(getattr(document, field) for field in fields)
            if any(value is None for value in values):
                continue
            for other_key, other in self._documents.items():
                if other_key == key:
                    continue
                if tuple(getattr(other, field) for field in fields) == values:
                    raise DuplicateKeyError(self._spec.name, fields)


class InMemoryDocumentStore(DocumentStore):
    """In-memory implementation of DocumentStore."""

    def __init__(self) -> None:
        self._collections: dict[str, InMemoryCollection[Any]] = {}

    def collection(self, spec: CollectionSpec[T]) -> InMemoryCollection[T]:
        collection = self._collections.get(spec.name)
        if collection is None:
            collection = self._collections[spec.name] = InMemoryCollection(spec)
        return collection

    async def list_collection_names(self) -> list[str]:
        return [name for name, collection in self._collections.items() if collection.exists]

    async def drop_collection(self, name: str) -> None:
        collection = self._collections.get(name)
        if collection is not None:
            collection.reset()
