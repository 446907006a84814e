"""Document store implementations."""

from authrepo.persistence.store.inmemory import InMemoryCollection, InMemoryDocumentStore
from authrepo.persistence.store.sql import SqlCollection, SqlDocumentStore

__all__ = [
    "InMemoryCollection",
    "InMemoryDocumentStore",
    "SqlCollection",
    "SqlDocumentStore",
]
