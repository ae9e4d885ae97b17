"""
Catalog reconciliation: make a remote collection match the operator's
working set.

Every item becomes a full-replacement upsert, every remote ID missing from the
working set becomes a delete, and all of it is committed as one batch guarded
by the collection revision read just before the diff. A save based on a page
loaded before someone else's save fails with a conflict instead of silently
deleting their new documents.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from django.conf import settings

from docstore.backends.base import DocumentStore, WriteBatch, strip_unset
from docstore.exceptions import RevisionConflict

from ..site_config import (
    CATEGORIES_DOC,
    CONFIG_COLLECTION,
    PAYMENT_DOC,
    PLANS_DOC,
)
from .items import PRODUCTS, SLIDES, VIDEOS

logger = logging.getLogger(__name__)


class InvalidWorkingSet(ValueError):
    pass


class StaleWorkingSet(RevisionConflict):
    """The collection changed after the operator loaded it."""


@dataclass(frozen=True)
class ReconcileResult:
    collection: str
    upserted: Tuple[str, ...]
    deleted: Tuple[str, ...]
    revision: int


def _split_item(item) -> Tuple[Any, Dict[str, Any]]:
    if isinstance(item, Mapping):
        data = {key: value for key, value in item.items() if key != 'id'}
        return item.get('id'), data
    return getattr(item, 'id', None), item.to_document()


def prepare_working_set(items: Iterable[Any]) -> List[Tuple[str, Dict[str, Any]]]:
    """
    Validates IDs and strips UNSET fields.

    Items are mappings holding an 'id' key or catalog entities exposing `id`
    and `to_document()`. Raises InvalidWorkingSet on an empty or repeated ID.
    """
    prepared = []
    seen = set()
    for position, item in enumerate(items):
        doc_id, data = _split_item(item)
        if not isinstance(doc_id, str) or not doc_id.strip():
            raise InvalidWorkingSet(f"item #{position} has no id")
        if doc_id in seen:
            raise InvalidWorkingSet(f"duplicate id {doc_id!r}")
        seen.add(doc_id)
        prepared.append((doc_id, strip_unset(data)))
    return prepared


def stage_collection(batch: WriteBatch, store: DocumentStore, collection: str,
                     items: Iterable[Any], expected_revision: Optional[int] = None) -> ReconcileResult:
    """
    Adds the reconciliation writes for one collection to `batch`.

    The returned result carries the revision the diff was computed against.
    """
    prepared = prepare_working_set(items)
    snapshot = store.snapshot(collection)
    if expected_revision is not None and expected_revision != snapshot.revision:
        raise StaleWorkingSet(collection, expected_revision, snapshot.revision)

    upserted = tuple(doc_id for doc_id, _ in prepared)
    deleted = tuple(sorted(snapshot.ids - set(upserted)))

    batch.expect_revision(collection, snapshot.revision)
    for doc_id, data in prepared:
        batch.set(collection, doc_id, data)
    for doc_id in deleted:
        batch.delete(collection, doc_id)
    return ReconcileResult(collection, upserted, deleted, snapshot.revision)


def reconcile_collection(store: DocumentStore, collection: str, items: Sequence[Any],
                         expected_revision: Optional[int] = None) -> ReconcileResult:
    batch = store.batch()
    staged = stage_collection(batch, store, collection, items, expected_revision)
    revisions = batch.commit()
    logger.info(
        "Reconciled %s: %d upserted, %d deleted",
        collection, len(staged.upserted), len(staged.deleted),
    )
    return ReconcileResult(
        collection, staged.upserted, staged.deleted,
        revisions.get(collection, staged.revision),
    )


@dataclass
class CatalogPayload:
    """Everything the back-office dashboard saves in one go."""

    products: List[Any] = field(default_factory=list)
    slides: List[Any] = field(default_factory=list)
    videos: List[Any] = field(default_factory=list)
    categories: Optional[Dict[str, Any]] = None
    payment_methods: Optional[List[Dict[str, Any]]] = None
    subscription_plans: Optional[Dict[str, Any]] = None
    revisions: Dict[str, int] = field(default_factory=dict)


def save_catalog(store: DocumentStore, payload: CatalogPayload) -> Dict[str, ReconcileResult]:
    """
    Reconciles products, slides and videos and merges the config documents,
    all in a single atomic batch.
    """
    methods = payload.payment_methods
    if methods is not None and len(methods) > settings.MAX_PAYMENT_METHODS:
        raise InvalidWorkingSet(f"at most {settings.MAX_PAYMENT_METHODS} payment methods are allowed")

    batch = store.batch()
    staged = {}
    for collection, items in ((PRODUCTS, payload.products), (SLIDES, payload.slides), (VIDEOS, payload.videos)):
        staged[collection] = stage_collection(
            batch, store, collection, items, payload.revisions.get(collection),
        )

    if payload.categories is not None:
        batch.set(CONFIG_COLLECTION, CATEGORIES_DOC, payload.categories, merge=True)
    if methods is not None:
        batch.set(CONFIG_COLLECTION, PAYMENT_DOC, {'methods': methods}, merge=True)
    if payload.subscription_plans is not None:
        batch.set(CONFIG_COLLECTION, PLANS_DOC, payload.subscription_plans, merge=True)

    revisions = batch.commit()
    logger.info(
        "Catalog saved: %s",
        ", ".join(f"{name} +{len(r.upserted)}/-{len(r.deleted)}" for name, r in staged.items()),
    )
    return {
        name: ReconcileResult(name, result.upserted, result.deleted, revisions.get(name, result.revision))
        for name, result in staged.items()
    }
