"""
Document store kept in the site's own database.

Each document is a JSON row; each collection has a revision row. A batch is
one `transaction.atomic()` block that locks the revision rows it touches, so
concurrent batches on the same collection are serialized and the revision
preconditions are checked against committed state.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, List

from django.db import DatabaseError, transaction
from django.utils import timezone

from ..encoding import normalize
from ..exceptions import DocumentNotFound, RevisionConflict, StoreUnavailable
from ..models import CollectionRevision, StoredDocument
from .base import (
    ArrayUnion,
    Document,
    DocumentStore,
    Increment,
    SERVER_TIMESTAMP,
    Snapshot,
    WriteOperation,
    sort_documents,
    strip_unset,
)

logger = logging.getLogger(__name__)


@contextmanager
def _translate_errors():
    try:
        yield
    except DatabaseError as exc:
        logger.error("Document store database error: %s", exc, exc_info=True)
        raise StoreUnavailable(str(exc)) from exc


def _resolve(value, current, merge):
    if value is SERVER_TIMESTAMP:
        return timezone.now()
    if isinstance(value, Increment):
        base = current if isinstance(current, (int, float)) and not isinstance(current, bool) else 0
        return base + value.amount
    if isinstance(value, ArrayUnion):
        existing = list(current) if isinstance(current, list) else []
        for item in normalize(value.values):
            if item not in existing:
                existing.append(item)
        return existing
    if isinstance(value, dict):
        nested = current if merge and isinstance(current, dict) else {}
        return apply_fields(nested, value, merge)
    return value


def apply_fields(base: Dict, data: Dict, merge: bool = True) -> Dict:
    """
    Applies `data` on top of `base`, resolving transforms and sentinels.

    Nested maps are merged key by key when `merge` is true.
    """
    result = dict(base)
    for key, value in strip_unset(data).items():
        result[key] = _resolve(value, result.get(key), merge)
    return result


class DjangoDocumentStore(DocumentStore):

    def __init__(self, using=None, **options):
        self.using = using

    def _documents(self, collection):
        queryset = StoredDocument.objects.filter(collection=collection)
        if self.using:
            queryset = queryset.using(self.using)
        return queryset

    def get(self, collection, doc_id):
        with _translate_errors():
            row = self._documents(collection).filter(doc_id=doc_id).first()
        if row is None:
            return None
        return Document(id=row.doc_id, data=row.data)

    def list(self, collection, order_by=None, descending=False):
        with _translate_errors():
            documents = [
                Document(id=row.doc_id, data=row.data)
                for row in self._documents(collection)
            ]
        return sort_documents(documents, order_by, descending)

    def revision(self, collection):
        with _translate_errors():
            row = CollectionRevision.objects.using(self.using).filter(collection=collection).first()
        return row.revision if row else 0

    def snapshot(self, collection):
        with _translate_errors(), transaction.atomic(using=self.using):
            ids = frozenset(self._documents(collection).values_list('doc_id', flat=True))
            revision = self.revision(collection)
        return Snapshot(collection=collection, ids=ids, revision=revision)

    def commit_batch(self, operations: List[WriteOperation], preconditions: Dict[str, int]):
        collections = sorted({op.collection for op in operations} | set(preconditions))
        with _translate_errors(), transaction.atomic(using=self.using):
            revisions = {}
            for name in collections:
                revisions[name], _ = (
                    CollectionRevision.objects.using(self.using)
                    .select_for_update()
                    .get_or_create(collection=name)
                )
            for name, expected in preconditions.items():
                actual = revisions[name].revision
                if actual != expected:
                    raise RevisionConflict(name, expected, actual)

            changed = set()
            for op in operations:
                if self._apply_operation(op) and not op.counter_only:
                    changed.add(op.collection)

            for name in changed:
                revisions[name].revision += 1
                revisions[name].save(update_fields=['revision', 'updated_at'])

        if changed:
            logger.debug("Committed %d operations, changed %s", len(operations), sorted(changed))
        return {name: row.revision for name, row in revisions.items()}

    def _apply_operation(self, op: WriteOperation) -> bool:
        """
        Applies one write; returns False when it left the stored data unchanged.
        """
        documents = self._documents(op.collection)
        row = documents.filter(doc_id=op.doc_id).first()

        if op.action == 'delete':
            if row is None:
                return False
            row.delete()
            return True

        if op.action == 'update':
            if row is None:
                raise DocumentNotFound(op.collection, op.doc_id)
            data = apply_fields(row.data, op.data, merge=False)
        elif op.merge and row is not None:
            data = apply_fields(row.data, op.data, merge=True)
        else:
            data = apply_fields({}, op.data, merge=False)

        data = normalize(data)
        if row is None:
            StoredDocument.objects.using(self.using).create(
                collection=op.collection, doc_id=op.doc_id, data=data,
            )
            return True
        if row.data == data:
            return False
        row.data = data
        row.save(update_fields=['data', 'updated_at'])
        return True
