"""
Cloud Firestore backend (firebase-admin).

Collection revisions live in the `_revisions` collection, one document per
collection name. A batch runs as a Firestore transaction: revision and
existence reads happen first, then every write plus the revision increments.
"""
from __future__ import annotations

import json
import logging
import os
from contextlib import contextmanager

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions

from ..exceptions import (
    DocumentNotFound,
    DocumentStoreError,
    PermissionDeniedError,
    RevisionConflict,
    StoreUnavailable,
)
from .base import (
    ArrayUnion,
    Document,
    DocumentStore,
    Increment,
    SERVER_TIMESTAMP,
    Snapshot,
    sort_documents,
    strip_unset,
)

logger = logging.getLogger(__name__)

REVISIONS_COLLECTION = '_revisions'
MAX_BATCH_OPERATIONS = 500


@contextmanager
def _translate_errors():
    try:
        yield
    except (google_exceptions.PermissionDenied, google_exceptions.Forbidden,
            google_exceptions.Unauthenticated) as exc:
        raise PermissionDeniedError(str(exc)) from exc
    except (google_exceptions.ServiceUnavailable, google_exceptions.DeadlineExceeded,
            google_exceptions.RetryError) as exc:
        logger.warning("Firestore unavailable: %s", exc)
        raise StoreUnavailable(str(exc)) from exc
    except google_exceptions.GoogleAPICallError as exc:
        logger.error("Firestore call failed: %s", exc, exc_info=True)
        raise DocumentStoreError(str(exc)) from exc


def _to_firestore(value):
    if value is SERVER_TIMESTAMP:
        return firestore.SERVER_TIMESTAMP
    if isinstance(value, Increment):
        return firestore.Increment(value.amount)
    if isinstance(value, ArrayUnion):
        return firestore.ArrayUnion(value.values)
    if isinstance(value, dict):
        return {key: _to_firestore(item) for key, item in strip_unset(value).items()}
    return value


def _load_credentials(credentials_path='', credentials_json=''):
    if credentials_path and os.path.exists(credentials_path):
        return credentials.Certificate(credentials_path)
    if credentials_json:
        return credentials.Certificate(json.loads(credentials_json))
    return credentials.ApplicationDefault()


class FirestoreDocumentStore(DocumentStore):

    def __init__(self, credentials_path='', credentials_json='', project_id='', client=None, **options):
        self._client = client
        self._credentials_path = credentials_path
        self._credentials_json = credentials_json
        self._project_id = project_id

    @property
    def client(self):
        if self._client is None:
            if not firebase_admin._apps:
                app_options = {'projectId': self._project_id} if self._project_id else None
                firebase_admin.initialize_app(
                    _load_credentials(self._credentials_path, self._credentials_json),
                    app_options,
                )
            self._client = firestore.client()
        return self._client

    def _revision_ref(self, collection):
        return self.client.collection(REVISIONS_COLLECTION).document(collection)

    def get(self, collection, doc_id):
        with _translate_errors():
            snap = self.client.collection(collection).document(doc_id).get()
        if not snap.exists:
            return None
        return Document(id=snap.id, data=snap.to_dict() or {})

    def list(self, collection, order_by=None, descending=False):
        with _translate_errors():
            documents = [
                Document(id=snap.id, data=snap.to_dict() or {})
                for snap in self.client.collection(collection).stream()
            ]
        return sort_documents(documents, order_by, descending)

    def revision(self, collection):
        with _translate_errors():
            snap = self._revision_ref(collection).get()
        if not snap.exists:
            return 0
        return int((snap.to_dict() or {}).get('revision', 0))

    def snapshot(self, collection):
        # Revision first: a write landing in between makes the snapshot look
        # older than it is, which fails the precondition instead of losing data.
        revision = self.revision(collection)
        with _translate_errors():
            ids = frozenset(snap.id for snap in self.client.collection(collection).select([]).stream())
        return Snapshot(collection=collection, ids=ids, revision=revision)

    def commit_batch(self, operations, preconditions):
        if len(operations) > MAX_BATCH_OPERATIONS:
            raise DocumentStoreError(
                f"batch of {len(operations)} writes exceeds the limit of {MAX_BATCH_OPERATIONS}"
            )
        client = self.client
        collections = sorted({op.collection for op in operations} | set(preconditions))
        changed = sorted({op.collection for op in operations if not op.counter_only})

        @firestore.transactional
        def _commit(transaction):
            revisions = {}
            for name in collections:
                snap = self._revision_ref(name).get(transaction=transaction)
                revisions[name] = int((snap.to_dict() or {}).get('revision', 0)) if snap.exists else 0
            for name, expected in preconditions.items():
                if revisions[name] != expected:
                    raise RevisionConflict(name, expected, revisions[name])
            for op in operations:
                if op.action == 'update':
                    ref = client.collection(op.collection).document(op.doc_id)
                    if not ref.get(transaction=transaction).exists:
                        raise DocumentNotFound(op.collection, op.doc_id)

            for op in operations:
                ref = client.collection(op.collection).document(op.doc_id)
                if op.action == 'delete':
                    transaction.delete(ref)
                elif op.action == 'update':
                    transaction.update(ref, _to_firestore(op.data))
                else:
                    transaction.set(ref, _to_firestore(op.data), merge=op.merge)
            for name in changed:
                transaction.set(
                    self._revision_ref(name),
                    {'revision': revisions[name] + 1, 'updated_at': firestore.SERVER_TIMESTAMP},
                )
                revisions[name] += 1
            return revisions

        with _translate_errors():
            return _commit(client.transaction())
