"""
Document store contract and the in-memory backend.

The ledger only needs a handful of primitives from its database:
- get / insert / update / delete of single documents keyed by ``_id``
- flat queries with equality and comparison filters, sort and limit
- an atomic multi-document read-modify-write (``run_transaction``)

``MongoDocumentStore`` (app.db.mongo) maps these onto Motor sessions.
``MemoryDocumentStore`` keeps everything in process and implements
transactions with per-document versions: reads remember the version they saw,
writes are buffered, and commit re-checks every version before applying.
A failed check is a conflict and the whole attempt is re-run.

Transactions must do all of their reads before their first write.
"""

import asyncio
import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, TypeVar

from bson import ObjectId

from app.core.errors import ConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Filters = Dict[str, Any]
Sort = List[Tuple[str, int]]

ASCENDING = 1
DESCENDING = -1


def new_id() -> str:
    """Opaque document id (ObjectId hex string)."""
    return str(ObjectId())


class TransactionConflict(Exception):
    """A concurrent writer changed data this attempt depended on."""


class DocumentSession(ABC):
    """Document operations, either standalone or bound to a transaction."""

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[dict]:
        ...

    @abstractmethod
    async def find(
        self,
        collection: str,
        filters: Optional[Filters] = None,
        sort: Optional[Sort] = None,
        limit: Optional[int] = None
    ) -> List[dict]:
        ...

    @abstractmethod
    async def count(self, collection: str, filters: Optional[Filters] = None) -> int:
        ...

    @abstractmethod
    async def insert(self, collection: str, doc: dict) -> dict:
        """Insert a document, assigning ``_id`` when missing. Returns the stored document."""

    @abstractmethod
    async def update(self, collection: str, doc_id: str, fields: dict) -> bool:
        """Set ``fields`` on one document. Returns False when it does not exist."""

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        ...

    @abstractmethod
    async def delete_many(self, collection: str, filters: Filters) -> int:
        ...


class DocumentStore(DocumentSession):
    """A session that can also open atomic transactions."""

    max_retries: int = 5

    async def run_transaction(self, fn: Callable[[DocumentSession], Awaitable[T]]) -> T:
        """
        Run ``fn`` atomically and return its result.

        ``fn`` may be called more than once, so it must not have side effects
        outside the session it is given. Errors raised by ``fn`` abort the
        attempt and propagate unchanged.
        """
        for attempt in range(1, self.max_retries + 1):
            try:
                return await self._run_once(fn)
            except TransactionConflict as exc:
                logger.warning(
                    "Transaction conflict (attempt %d/%d): %s",
                    attempt, self.max_retries, exc
                )
        raise ConflictError("The record was changed by someone else. Please try again.")

    @abstractmethod
    async def _run_once(self, fn: Callable[[DocumentSession], Awaitable[T]]) -> T:
        ...

    async def close(self) -> None:
        pass


# ===== FILTER MATCHING =====

def _gt(value, arg):
    return value is not None and value > arg


def _gte(value, arg):
    return value is not None and value >= arg


def _lt(value, arg):
    return value is not None and value < arg


def _lte(value, arg):
    return value is not None and value <= arg


_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    "$ne": lambda value, arg: value != arg,
    "$gt": _gt,
    "$gte": _gte,
    "$lt": _lt,
    "$lte": _lte,
    "$in": lambda value, arg: value in arg,
}


def matches(doc: dict, filters: Optional[Filters]) -> bool:
    """Evaluate a flat Mongo-style filter against a document."""
    for field, condition in (filters or {}).items():
        value = doc.get(field)
        if isinstance(condition, dict):
            for op, arg in condition.items():
                check = _OPERATORS.get(op)
                if check is None:
                    raise ValueError(f"Unsupported filter operator: {op}")
                if not check(value, arg):
                    return False
        elif value != condition:
            return False
    return True


def _sorted(docs: List[dict], sort: Optional[Sort]) -> List[dict]:
    # Stable sorts applied from the last key to the first; None sorts first
    for field, direction in reversed(sort or []):
        docs = sorted(
            docs,
            key=lambda d: (d.get(field) is not None, d.get(field)),
            reverse=direction == DESCENDING
        )
    return docs


def _public(stored: Optional[dict]) -> Optional[dict]:
    if stored is None:
        return None
    doc = copy.deepcopy(stored)
    doc.pop("_version", None)
    return doc


# ===== IN-MEMORY BACKEND =====

class MemoryDocumentStore(DocumentStore):
    """Process-local store used for development and tests."""

    def __init__(self, max_retries: int = 5):
        self.max_retries = max_retries
        self._collections: Dict[str, Dict[str, dict]] = {}
        self._collection_versions: Dict[str, int] = {}
        self._clock = 0
        self._lock = asyncio.Lock()

    def _docs(self, collection: str) -> Dict[str, dict]:
        return self._collections.setdefault(collection, {})

    def _tick(self, collection: str) -> int:
        self._clock += 1
        self._collection_versions[collection] = self._clock
        return self._clock

    def _version_of(self, collection: str, doc_id: str) -> int:
        stored = self._docs(collection).get(doc_id)
        return stored["_version"] if stored else 0

    def _select(self, collection: str, filters: Optional[Filters]) -> List[dict]:
        return [doc for doc in self._docs(collection).values() if matches(doc, filters)]

    # Writes are applied without awaiting, so each one is atomic on the loop

    def _apply_insert(self, collection: str, doc: dict) -> None:
        docs = self._docs(collection)
        if doc["_id"] in docs:
            raise ConflictError(f"Duplicate id {doc['_id']} in {collection}")
        stored = copy.deepcopy(doc)
        stored["_version"] = self._tick(collection)
        docs[doc["_id"]] = stored

    def _apply_update(self, collection: str, doc_id: str, fields: dict) -> bool:
        stored = self._docs(collection).get(doc_id)
        if stored is None:
            return False
        stored.update(copy.deepcopy(fields))
        stored["_version"] = self._tick(collection)
        return True

    def _apply_delete(self, collection: str, doc_id: str) -> bool:
        if self._docs(collection).pop(doc_id, None) is None:
            return False
        self._tick(collection)
        return True

    async def get(self, collection, doc_id):
        return _public(self._docs(collection).get(doc_id))

    async def find(self, collection, filters=None, sort=None, limit=None):
        docs = _sorted(self._select(collection, filters), sort)
        if limit:
            docs = docs[:limit]
        return [_public(doc) for doc in docs]

    async def count(self, collection, filters=None):
        return len(self._select(collection, filters))

    async def insert(self, collection, doc):
        doc = dict(doc)
        doc.setdefault("_id", new_id())
        self._apply_insert(collection, doc)
        return doc

    async def update(self, collection, doc_id, fields):
        return self._apply_update(collection, doc_id, fields)

    async def delete(self, collection, doc_id):
        return self._apply_delete(collection, doc_id)

    async def delete_many(self, collection, filters):
        ids = [doc["_id"] for doc in self._select(collection, filters)]
        for doc_id in ids:
            self._apply_delete(collection, doc_id)
        return len(ids)

    async def _run_once(self, fn):
        txn = _MemoryTransaction(self)
        result = await fn(txn)
        await txn.commit()
        return result


class _MemoryTransaction(DocumentSession):
    """Optimistic transaction over a MemoryDocumentStore."""

    def __init__(self, store: MemoryDocumentStore):
        self._store = store
        self._read_versions: Dict[Tuple[str, str], int] = {}
        self._query_versions: Dict[str, int] = {}
        self._writes: List[Tuple[str, str, Any]] = []

    def _check_reads_allowed(self) -> None:
        if self._writes:
            raise RuntimeError("Transactions must perform all reads before writing")

    def _remember_query(self, collection: str) -> None:
        self._query_versions.setdefault(
            collection, self._store._collection_versions.get(collection, 0)
        )

    async def get(self, collection, doc_id):
        self._check_reads_allowed()
        self._read_versions.setdefault(
            (collection, doc_id), self._store._version_of(collection, doc_id)
        )
        return await self._store.get(collection, doc_id)

    async def find(self, collection, filters=None, sort=None, limit=None):
        self._check_reads_allowed()
        self._remember_query(collection)
        return await self._store.find(collection, filters, sort, limit)

    async def count(self, collection, filters=None):
        self._check_reads_allowed()
        self._remember_query(collection)
        return await self._store.count(collection, filters)

    async def insert(self, collection, doc):
        doc = dict(doc)
        doc.setdefault("_id", new_id())
        self._writes.append(("insert", collection, doc))
        return doc

    async def update(self, collection, doc_id, fields):
        self._writes.append(("update", collection, (doc_id, dict(fields))))
        return doc_id in self._store._docs(collection)

    async def delete(self, collection, doc_id):
        self._writes.append(("delete", collection, doc_id))
        return doc_id in self._store._docs(collection)

    async def delete_many(self, collection, filters):
        self._remember_query(collection)
        ids = [doc["_id"] for doc in self._store._select(collection, filters)]
        for doc_id in ids:
            self._writes.append(("delete", collection, doc_id))
        return len(ids)

    async def commit(self) -> None:
        store = self._store
        async with store._lock:
            for (collection, doc_id), seen in self._read_versions.items():
                if store._version_of(collection, doc_id) != seen:
                    raise TransactionConflict(f"{collection}/{doc_id} changed")
            for collection, seen in self._query_versions.items():
                if store._collection_versions.get(collection, 0) != seen:
                    raise TransactionConflict(f"{collection} changed")

            for op, collection, payload in self._writes:
                if op == "insert":
                    store._apply_insert(collection, payload)
                elif op == "update":
                    doc_id, fields = payload
                    store._apply_update(collection, doc_id, fields)
                else:
                    store._apply_delete(collection, payload)
