"""
Errors raised by document store backends.

Every backend translates its native failures into these classes so callers
only ever catch `DocumentStoreError` and its subclasses.
"""


class DocumentStoreError(Exception):
    code = "unknown"


class StoreUnavailable(DocumentStoreError):
    """Network or connectivity failure reaching the store."""

    code = "unavailable"


class PermissionDeniedError(DocumentStoreError):
    """The store's access rules rejected the request."""

    code = "permission-denied"


class DocumentNotFound(DocumentStoreError):
    code = "not-found"

    def __init__(self, collection, doc_id):
        self.collection = collection
        self.doc_id = doc_id
        super().__init__(f"{collection}/{doc_id} does not exist")


class RevisionConflict(DocumentStoreError):
    """A batch precondition on a collection revision did not hold."""

    code = "aborted"

    def __init__(self, collection, expected, actual):
        self.collection = collection
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{collection} is at revision {actual}, expected {expected}"
        )
