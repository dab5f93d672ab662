# -*- coding: utf-8 -*-
########################
# document_store.py
########################
# Purpose:
# - Interface of the transactional document store that trainer progress is persisted to.
# - In-memory implementation used by tests, the CLI and offline sessions.
#
# Design notes:
# - Keys are slash separated paths. A document belongs to collection C when its key is "C/<id>".
# - run_transaction gives read-then-write isolation. Writes are buffered and applied only when the
#   callback returns; an exception inside the callback discards them.
# - increment is the native atomic increment; callers use it instead of read-modify-write.
# - Values handed out are copies. Mutating a returned dict never changes the store.
# - Backend failures surface as StoreError.
#
########################
# Interfaces:
# Public exceptions:
# - class StoreError(Exception)
#
# Public protocols:
# - Transaction: get(key) -> Optional[dict], set(key, fields, *, merge=True) -> None
# - DocumentStore:
#   - get(key: str) -> Optional[dict]
#   - set(key: str, fields: dict, *, merge: bool = True) -> None
#   - increment(key: str, field: str, delta: float) -> None
#   - run_transaction(fn: Callable[[Transaction], T]) -> T
#   - query(collection: str, *, order_by: str, descending: bool = False, limit: Optional[int] = None,
#           start_after: Optional[str] = None) -> list[tuple[str, dict]]
#   - delete_batch(keys: Iterable[str]) -> None
#
# Public classes:
# - class InMemoryDocumentStore
#
########################

from __future__ import annotations

import copy
import threading
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Tuple, TypeVar

T = TypeVar("T")

Document = Dict[str, Any]


class StoreError(Exception):
    pass


class Transaction(Protocol):
    def get(self, key: str) -> Optional[Document]:
        ...

    def set(self, key: str, fields: Document, *, merge: bool = True) -> None:
        ...


class DocumentStore(Protocol):
    def get(self, key: str) -> Optional[Document]:
        ...

    def set(self, key: str, fields: Document, *, merge: bool = True) -> None:
        ...

    def increment(self, key: str, field: str, delta: float) -> None:
        ...

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        ...

    def query(
        self,
        collection: str,
        *,
        order_by: str,
        descending: bool = False,
        limit: Optional[int] = None,
        start_after: Optional[str] = None,
    ) -> List[Tuple[str, Document]]:
        ...

    def delete_batch(self, keys: Iterable[str]) -> None:
        ...


def _merged(existing: Optional[Document], fields: Document, merge: bool) -> Document:
    if merge and existing is not None:
        result = dict(existing)
        result.update(copy.deepcopy(fields))
        return result
    return copy.deepcopy(dict(fields))


class _BufferedTransaction:
    def __init__(self, store: "InMemoryDocumentStore") -> None:
        self._store = store
        self._writes: Dict[str, Document] = {}

    def get(self, key: str) -> Optional[Document]:
        if key in self._writes:
            return copy.deepcopy(self._writes[key])
        return self._store._read(key)

    def set(self, key: str, fields: Document, *, merge: bool = True) -> None:
        self._writes[key] = _merged(self.get(key), fields, merge)

    def _commit(self) -> None:
        for key, document in self._writes.items():
            self._store._documents[key] = document


class InMemoryDocumentStore:
    def __init__(self) -> None:
        self._documents: Dict[str, Document] = {}
        self._lock = threading.RLock()

    def _read(self, key: str) -> Optional[Document]:
        document = self._documents.get(str(key))
        return copy.deepcopy(document) if document is not None else None

    def get(self, key: str) -> Optional[Document]:
        with self._lock:
            return self._read(key)

    def set(self, key: str, fields: Document, *, merge: bool = True) -> None:
        with self._lock:
            self._documents[str(key)] = _merged(self._documents.get(str(key)), fields, merge)

    def increment(self, key: str, field: str, delta: float) -> None:
        with self._lock:
            document = self._documents.setdefault(str(key), {})
            current = document.get(field, 0)
            if not isinstance(current, (int, float)):
                raise StoreError(f"Field {field!r} of {key!r} is not numeric")
            document[field] = current + delta

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        with self._lock:
            transaction = _BufferedTransaction(self)
            result = fn(transaction)
            transaction._commit()
            return result

    def query(
        self,
        collection: str,
        *,
        order_by: str,
        descending: bool = False,
        limit: Optional[int] = None,
        start_after: Optional[str] = None,
    ) -> List[Tuple[str, Document]]:
        prefix = collection.rstrip("/") + "/"
        with self._lock:
            rows = [
                (key, copy.deepcopy(document))
                for key, document in self._documents.items()
                if key.startswith(prefix) and "/" not in key[len(prefix):]
            ]
        rows.sort(key=lambda row: (row[1].get(order_by, 0), row[0]), reverse=descending)

        if start_after is not None:
            keys = [key for key, _document in rows]
            if start_after not in keys:
                raise StoreError(f"Cursor document {start_after!r} not found in {collection!r}")
            rows = rows[keys.index(start_after) + 1 :]

        if limit is not None:
            rows = rows[: max(0, int(limit))]
        return rows

    def delete_batch(self, keys: Iterable[str]) -> None:
        with self._lock:
            for key in list(keys):
                self._documents.pop(str(key), None)


def _run_unit_tests() -> None:
    store = InMemoryDocumentStore()
    store.set("users/u1", {"highScore": 10.0})
    store.set("users/u1", {"name": "op"})
    assert store.get("users/u1") == {"highScore": 10.0, "name": "op"}
    store.set("users/u1", {"name": "new"}, merge=False)
    assert store.get("users/u1") == {"name": "new"}

    store.increment("users/u1", "runs", 1)
    store.increment("users/u1", "runs", 1)
    assert store.get("users/u1")["runs"] == 2

    for index in range(5):
        store.set(f"users/u1/run_history/r{index}", {"timestamp": index})
    newest = store.query("users/u1/run_history", order_by="timestamp", descending=True, limit=2)
    assert [key for key, _ in newest] == ["users/u1/run_history/r4", "users/u1/run_history/r3"]
    older = store.query("users/u1/run_history", order_by="timestamp", descending=True, start_after=newest[-1][0])
    assert len(older) == 3

    def failing(transaction: Transaction) -> None:
        transaction.set("users/u1", {"name": "lost"})
        raise RuntimeError("abort")

    try:
        store.run_transaction(failing)
    except RuntimeError:
        pass
    assert store.get("users/u1")["name"] == "new"


if __name__ == "__main__":
    _run_unit_tests()
    print("document_store.py: ok")
