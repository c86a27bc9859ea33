"""Document store abstraction with durable (SQL) and in-memory implementations.

Documents are JSON-compatible dicts grouped in named collections. Nested
fields are addressed with dotted paths (``stats.unlock_count``). Every
read-modify-write goes through `transact`, which each backend runs
atomically for a single document, so counters never lose increments.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any, Final, TypeVar

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from trove.models.document import Document

logger = logging.getLogger(__name__)

T = TypeVar("T")
JsonDoc = dict[str, Any]
Mutator = Callable[[JsonDoc | None], tuple[JsonDoc | None, T]]

_MAX_TRANSACT_ATTEMPTS: Final[int] = 3
_MISSING = object()


class DocumentNotFoundError(KeyError):
    """Raised when an update targets a document that does not exist."""

    def __init__(self, collection: str, doc_id: str) -> None:
        super().__init__(f"{collection}/{doc_id}")
        self.collection = collection
        self.doc_id = doc_id


def get_path(document: Mapping[str, Any], path: str, default: Any = None) -> Any:
    """Read a dotted path from a nested mapping."""
    node: Any = document
    for part in path.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return node


def set_path(document: JsonDoc, path: str, value: Any) -> None:
    """Write a dotted path into a nested dict, creating intermediate dicts."""
    parts = path.split(".")
    node = document
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def matches(document: Mapping[str, Any], filters: Mapping[str, Any] | None) -> bool:
    """Return True if every dotted-path filter equals the document's value."""
    if not filters:
        return True
    return all(get_path(document, path, _MISSING) == value for path, value in filters.items())


class DocumentStore(ABC):
    """Per-collection key-value document store."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> JsonDoc | None:
        """Return a copy of the document or None."""

    @abstractmethod
    async def put(self, collection: str, doc_id: str, document: JsonDoc) -> None:
        """Create or replace a document."""

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document; return True if it existed."""

    @abstractmethod
    async def query(
        self, collection: str, filters: Mapping[str, Any] | None = None
    ) -> list[JsonDoc]:
        """Return every document of `collection` matching the equality filters."""

    @abstractmethod
    async def transact(self, collection: str, doc_id: str, mutate: Mutator[T]) -> T:
        """Atomically apply `mutate` to one document.

        `mutate` receives a private copy of the current document (or None) and
        returns ``(new_document, result)``. A None document leaves the store
        untouched. `mutate` may run more than once and must be side-effect free.
        """

    async def add(self, collection: str, document: JsonDoc) -> str:
        """Append a document under a generated id and return the id."""
        doc_id = uuid.uuid4().hex
        await self.put(collection, doc_id, document)
        return doc_id

    async def update(
        self,
        collection: str,
        doc_id: str,
        fields: Mapping[str, Any] | None = None,
        increments: Mapping[str, int | float] | None = None,
    ) -> JsonDoc:
        """Set fields and atomically increment numeric fields of an existing document.

        Raises:
            DocumentNotFoundError: If the document does not exist.
        """

        def _apply(current: JsonDoc | None) -> tuple[JsonDoc, JsonDoc]:
            if current is None:
                raise DocumentNotFoundError(collection, doc_id)
            for path, value in (fields or {}).items():
                set_path(current, path, value)
            for path, delta in (increments or {}).items():
                set_path(current, path, (get_path(current, path) or 0) + delta)
            return current, current

        return await self.transact(collection, doc_id, _apply)


class MemoryDocumentStore(DocumentStore):
    """Process-local store for tests and single-process development."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, JsonDoc]] = {}
        self._lock = asyncio.Lock()

    async def get(self, collection: str, doc_id: str) -> JsonDoc | None:
        async with self._lock:
            document = self._collections.get(collection, {}).get(doc_id)
            return copy.deepcopy(document) if document is not None else None

    async def put(self, collection: str, doc_id: str, document: JsonDoc) -> None:
        async with self._lock:
            self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(document)

    async def delete(self, collection: str, doc_id: str) -> bool:
        async with self._lock:
            return self._collections.get(collection, {}).pop(doc_id, None) is not None

    async def query(
        self, collection: str, filters: Mapping[str, Any] | None = None
    ) -> list[JsonDoc]:
        async with self._lock:
            return [
                copy.deepcopy(document)
                for document in self._collections.get(collection, {}).values()
                if matches(document, filters)
            ]

    async def transact(self, collection: str, doc_id: str, mutate: Mutator[T]) -> T:
        async with self._lock:
            documents = self._collections.setdefault(collection, {})
            current = documents.get(doc_id)
            updated, result = mutate(copy.deepcopy(current) if current is not None else None)
            if updated is not None:
                documents[doc_id] = copy.deepcopy(updated)
            return result


class SqlDocumentStore(DocumentStore):
    """Durable store over a single SQLAlchemy `document` table.

    `transact` locks the row with ``SELECT ... FOR UPDATE`` inside one
    transaction; concurrent first inserts of the same id are retried. SQLite
    has no row locks, so engines from `build_engine` open every SQLite
    transaction with ``BEGIN IMMEDIATE``; a store built on any other SQLite
    engine is not atomic.
    """

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession]) -> None:
        self._sessionmaker = sessionmaker

    async def get(self, collection: str, doc_id: str) -> JsonDoc | None:
        async with self._sessionmaker() as session:
            row = await session.get(Document, (collection, doc_id))
            return copy.deepcopy(row.body) if row is not None else None

    async def put(self, collection: str, doc_id: str, document: JsonDoc) -> None:
        async with self._sessionmaker() as session, session.begin():
            await session.merge(Document(collection=collection, doc_id=doc_id, body=document))

    async def delete(self, collection: str, doc_id: str) -> bool:
        async with self._sessionmaker() as session, session.begin():
            result = await session.execute(
                delete(Document).where(
                    Document.collection == collection,
                    Document.doc_id == doc_id,
                )
            )
            return bool(result.rowcount)

    async def query(
        self, collection: str, filters: Mapping[str, Any] | None = None
    ) -> list[JsonDoc]:
        # JSON path operators differ between dialects; filter bodies in Python.
        async with self._sessionmaker() as session:
            result = await session.execute(
                select(Document.body).where(Document.collection == collection)
            )
            return [dict(body) for body in result.scalars() if matches(body, filters)]

    async def transact(self, collection: str, doc_id: str, mutate: Mutator[T]) -> T:
        for attempt in range(1, _MAX_TRANSACT_ATTEMPTS + 1):
            try:
                async with self._sessionmaker() as session, session.begin():
                    row = (
                        await session.execute(
                            select(Document)
                            .where(Document.collection == collection, Document.doc_id == doc_id)
                            .with_for_update()
                        )
                    ).scalar_one_or_none()
                    current = copy.deepcopy(row.body) if row is not None else None
                    updated, result = mutate(current)
                    if updated is not None:
                        if row is None:
                            session.add(
                                Document(collection=collection, doc_id=doc_id, body=updated)
                            )
                        else:
                            row.body = updated
                return result
            except IntegrityError:
                if attempt == _MAX_TRANSACT_ATTEMPTS:
                    raise
                logger.debug("Concurrent insert of %s/%s, retrying", collection, doc_id)
        raise RuntimeError("unreachable")  # pragma: no cover
