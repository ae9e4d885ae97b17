from .base import (
    ArrayUnion,
    Document,
    DocumentStore,
    Increment,
    SERVER_TIMESTAMP,
    Snapshot,
    UNSET,
    WriteBatch,
    strip_unset,
)

__all__ = [
    "ArrayUnion",
    "Document",
    "DocumentStore",
    "Increment",
    "SERVER_TIMESTAMP",
    "Snapshot",
    "UNSET",
    "WriteBatch",
    "strip_unset",
]
