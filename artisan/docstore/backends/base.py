"""
Backend-neutral document store interface.

A store holds named collections of schema-less documents keyed by string
IDs. Writes go through `WriteBatch`, which the backend applies all-or-nothing.
Each collection carries a revision counter that the backend bumps whenever a
committed batch changes it, counter-only updates excepted; batches may
require a given revision as a precondition.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional


class _Sentinel:
    _name = "SENTINEL"
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return self._name

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (type(self), ())


class _Unset(_Sentinel):
    """Marks a field that was never given a value; stripped before writing."""

    _name = "UNSET"
    _instance = None

    def __bool__(self):
        return False


class _ServerTimestamp(_Sentinel):
    """Replaced by the store's clock when the write is applied."""

    _name = "SERVER_TIMESTAMP"
    _instance = None


UNSET = _Unset()
SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True)
class Increment:
    amount: int = 1


class ArrayUnion:
    """Appends the values that the stored list does not contain yet."""

    def __init__(self, *values):
        self.values = list(values)

    def __eq__(self, other):
        return isinstance(other, ArrayUnion) and other.values == self.values

    def __repr__(self):
        return f"ArrayUnion({self.values!r})"


def _strip_value(value):
    if isinstance(value, dict):
        return strip_unset(value)
    if isinstance(value, list):
        return [_strip_value(item) for item in value if item is not UNSET]
    if isinstance(value, ArrayUnion):
        return ArrayUnion(*(_strip_value(item) for item in value.values if item is not UNSET))
    return value


def strip_unset(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Returns a copy of `data` without UNSET values, looking inside nested maps
    and lists.
    """
    return {key: _strip_value(value) for key, value in data.items() if value is not UNSET}


@dataclass
class Document:
    id: str
    data: Dict[str, Any]

    def get(self, key, default=None):
        return self.data.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, **self.data}


@dataclass(frozen=True)
class Snapshot:
    """Document IDs of one collection plus the revision they were read at."""

    collection: str
    ids: FrozenSet[str]
    revision: int


@dataclass
class WriteOperation:
    action: str
    collection: str
    doc_id: str
    data: Optional[Dict[str, Any]] = None
    merge: bool = False

    @property
    def counter_only(self) -> bool:
        """
        True for an update that only increments counters (likes, views).
        Backends leave the collection revision alone for these.
        """
        return (
            self.action == "update"
            and bool(self.data)
            and all(isinstance(value, Increment) for value in self.data.values())
        )


@dataclass
class WriteBatch:
    store: "DocumentStore"
    operations: List[WriteOperation] = field(default_factory=list)
    preconditions: Dict[str, int] = field(default_factory=dict)
    committed: bool = False

    def set(self, collection, doc_id, data, merge=False):
        self.operations.append(WriteOperation("set", collection, doc_id, dict(data), merge))
        return self

    def update(self, collection, doc_id, data):
        self.operations.append(WriteOperation("update", collection, doc_id, dict(data)))
        return self

    def delete(self, collection, doc_id):
        self.operations.append(WriteOperation("delete", collection, doc_id))
        return self

    def expect_revision(self, collection, revision):
        self.preconditions[collection] = revision
        return self

    def __len__(self):
        return len(self.operations)

    def commit(self) -> Dict[str, int]:
        """
        Applies every operation atomically.

        Returns the revision of each touched or guarded collection after the
        commit. An empty batch is a no-op.
        """
        if self.committed:
            raise RuntimeError("batch already committed")
        self.committed = True
        if not self.operations:
            return {}
        return self.store.commit_batch(self.operations, self.preconditions)


class DocumentStore:
    """
    Interface every backend implements.

    Backends override the read methods and `commit_batch`; the single-write
    helpers are thin wrappers around one-operation batches.
    """

    def get(self, collection: str, doc_id: str) -> Optional[Document]:
        raise NotImplementedError

    def list(self, collection: str, order_by: Optional[str] = None,
             descending: bool = False) -> List[Document]:
        raise NotImplementedError

    def snapshot(self, collection: str) -> Snapshot:
        raise NotImplementedError

    def revision(self, collection: str) -> int:
        raise NotImplementedError

    def commit_batch(self, operations: List[WriteOperation],
                     preconditions: Dict[str, int]) -> Dict[str, int]:
        raise NotImplementedError

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    def add(self, collection: str, data: Dict[str, Any]) -> str:
        doc_id = self.new_id()
        self.batch().set(collection, doc_id, data).commit()
        return doc_id

    def set(self, collection: str, doc_id: str, data: Dict[str, Any], merge: bool = False):
        self.batch().set(collection, doc_id, data, merge=merge).commit()

    def update(self, collection: str, doc_id: str, data: Dict[str, Any]):
        self.batch().update(collection, doc_id, data).commit()

    def delete(self, collection: str, doc_id: str):
        self.batch().delete(collection, doc_id).commit()


def sort_documents(documents: List[Document], order_by: Optional[str],
                   descending: bool = False) -> List[Document]:
    """
    Orders documents by a field; documents without the field go last.
    """
    if not order_by:
        return documents
    present = [doc for doc in documents if doc.data.get(order_by) is not None]
    missing = [doc for doc in documents if doc.data.get(order_by) is None]
    present.sort(key=lambda doc: doc.data[order_by], reverse=descending)
    return present + missing
