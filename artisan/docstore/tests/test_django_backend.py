"""
Tests for the ORM document store backend.
"""
from datetime import datetime, timedelta, timezone as dt_timezone
from unittest import mock

from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError
from django.test import TestCase, override_settings

from docstore.backends.base import (
    ArrayUnion,
    Increment,
    SERVER_TIMESTAMP,
    UNSET,
    strip_unset,
)
from docstore.backends.django_orm import DjangoDocumentStore
from docstore.exceptions import (
    DocumentNotFound,
    PermissionDeniedError,
    RevisionConflict,
    StoreUnavailable,
)
from docstore.models import StoredDocument
from docstore.registry import get_document_store


class FailingStore(DjangoDocumentStore):
    """Rejects the write at position `fail_at` of a batch, after applying the earlier ones."""

    def __init__(self, fail_at=1):
        super().__init__()
        self.fail_at = fail_at
        self.applied = 0

    def _apply_operation(self, op):
        if self.applied == self.fail_at:
            raise PermissionDeniedError("Missing or insufficient permissions.")
        self.applied += 1
        return super()._apply_operation(op)


class BasicOperationTests(TestCase):

    def setUp(self):
        self.store = DjangoDocumentStore()

    def test_set_and_get(self):
        self.store.set('things', 'a', {'title': 'X', 'tags': ['one']})
        document = self.store.get('things', 'a')
        self.assertEqual(document.id, 'a')
        self.assertEqual(document.data, {'title': 'X', 'tags': ['one']})
        self.assertIsNone(self.store.get('things', 'missing'))

    def test_datetime_round_trip(self):
        moment = datetime(2024, 5, 17, 10, 30, 15, 123456, tzinfo=dt_timezone.utc)
        self.store.set('things', 'a', {'when': moment, 'nested': {'when': moment}})
        data = self.store.get('things', 'a').data
        self.assertEqual(data['when'], moment)
        self.assertEqual(data['nested']['when'], moment)

    def test_add_generates_id(self):
        doc_id = self.store.add('things', {'title': 'new'})
        self.assertTrue(doc_id)
        self.assertEqual(self.store.get('things', doc_id).data, {'title': 'new'})

    def test_set_replaces_without_merge(self):
        self.store.set('things', 'a', {'title': 'X', 'old': True})
        self.store.set('things', 'a', {'title': 'Y'})
        self.assertEqual(self.store.get('things', 'a').data, {'title': 'Y'})

    def test_set_merge_keeps_other_fields(self):
        self.store.set('config', 'payment', {'methods': [], 'note': 'keep', 'nested': {'a': 1, 'b': 2}})
        self.store.set('config', 'payment', {'methods': [{'id': '1'}], 'nested': {'b': 3}}, merge=True)
        self.assertEqual(
            self.store.get('config', 'payment').data,
            {'methods': [{'id': '1'}], 'note': 'keep', 'nested': {'a': 1, 'b': 3}},
        )

    def test_update_missing_document_raises(self):
        with self.assertRaises(DocumentNotFound):
            self.store.update('things', 'missing', {'title': 'X'})

    def test_unset_fields_are_not_stored(self):
        self.store.set('things', 'a', {'title': 'X', 'price': UNSET, 'nested': {'x': UNSET, 'y': 1}})
        self.assertEqual(self.store.get('things', 'a').data, {'title': 'X', 'nested': {'y': 1}})

    def test_strip_unset(self):
        self.assertEqual(strip_unset({'a': UNSET, 'b': None, 'c': {'d': UNSET}}), {'b': None, 'c': {}})

    def test_strip_unset_inside_lists(self):
        self.assertEqual(
            strip_unset({'urls': ['x', UNSET, 'y'], 'faqs': [{'q': 'Q', 'a': UNSET}]}),
            {'urls': ['x', 'y'], 'faqs': [{'q': 'Q'}]},
        )

    def test_unset_in_list_is_not_stored(self):
        self.store.set('things', 'a', {'media_urls': ['x', UNSET], 'faqs': [{'q': 'Q', 'a': UNSET}]})
        self.store.update('things', 'a', {'tags': ArrayUnion('t', UNSET)})
        self.assertEqual(
            self.store.get('things', 'a').data,
            {'media_urls': ['x'], 'faqs': [{'q': 'Q'}], 'tags': ['t']},
        )

    def test_list_orders_and_puts_missing_last(self):
        self.store.set('things', 'old', {'created_at': datetime(2023, 1, 1, tzinfo=dt_timezone.utc)})
        self.store.set('things', 'new', {'created_at': datetime(2024, 1, 1, tzinfo=dt_timezone.utc)})
        self.store.set('things', 'undated', {})
        ids = [doc.id for doc in self.store.list('things', order_by='created_at', descending=True)]
        self.assertEqual(ids, ['new', 'old', 'undated'])

    def test_collections_are_isolated(self):
        self.store.set('one', 'a', {'x': 1})
        self.store.set('two', 'a', {'x': 2})
        self.assertEqual(self.store.get('one', 'a').data, {'x': 1})
        self.assertEqual(self.store.snapshot('two').ids, frozenset({'a'}))


class TransformTests(TestCase):

    def setUp(self):
        self.store = DjangoDocumentStore()
        self.store.set('videos', 'v', {'views': 3})

    def test_increment_existing_and_missing_fields(self):
        self.store.update('videos', 'v', {'views': Increment(1), 'likes': Increment(2)})
        self.assertEqual(self.store.get('videos', 'v').data, {'views': 4, 'likes': 2})

    def test_array_union_skips_existing_values(self):
        self.store.update('videos', 'v', {'tags': ArrayUnion('a', 'b')})
        self.store.update('videos', 'v', {'tags': ArrayUnion('b', 'c')})
        self.assertEqual(self.store.get('videos', 'v').get('tags'), ['a', 'b', 'c'])

    def test_server_timestamp(self):
        before = datetime.now(dt_timezone.utc) - timedelta(seconds=1)
        self.store.update('videos', 'v', {'seen_at': SERVER_TIMESTAMP})
        self.assertGreater(self.store.get('videos', 'v').get('seen_at'), before)


class BatchTests(TestCase):

    def setUp(self):
        self.store = DjangoDocumentStore()
        self.store.set('things', 'a', {'title': 'OLD'})

    def test_batch_bumps_revision_once(self):
        before = self.store.revision('things')
        revisions = (
            self.store.batch()
            .set('things', 'b', {'title': 'Y'})
            .delete('things', 'a')
            .commit()
        )
        self.assertEqual(revisions['things'], before + 1)
        self.assertEqual(self.store.snapshot('things').ids, frozenset({'b'}))

    def test_empty_batch_is_noop(self):
        self.assertEqual(self.store.batch().commit(), {})

    def test_batch_cannot_be_committed_twice(self):
        batch = self.store.batch().set('things', 'b', {})
        batch.commit()
        with self.assertRaises(RuntimeError):
            batch.commit()

    def test_unchanged_write_keeps_revision(self):
        before = self.store.revision('things')
        self.store.set('things', 'a', {'title': 'OLD'})
        self.store.delete('things', 'missing')
        self.assertEqual(self.store.revision('things'), before)

    def test_counter_updates_keep_revision(self):
        self.store.set('things', 'a', {'title': 'OLD', 'likes': 0})
        before = self.store.revision('things')
        self.store.update('things', 'a', {'likes': Increment(1), 'views': Increment(3)})
        self.assertEqual(self.store.revision('things'), before)
        self.assertEqual(self.store.get('things', 'a').data, {'title': 'OLD', 'likes': 1, 'views': 3})

    def test_other_updates_bump_revision(self):
        before = self.store.revision('things')
        self.store.update('things', 'a', {'tags': ArrayUnion('x')})
        self.store.update('things', 'a', {'title': 'NEW', 'likes': Increment(1)})
        self.assertEqual(self.store.revision('things'), before + 2)

    def test_failed_write_rolls_back_whole_batch(self):
        failing = FailingStore(fail_at=1)
        before = failing.revision('things')
        with self.assertRaises(PermissionDeniedError):
            (
                failing.batch()
                .set('things', 'a', {'title': 'NEW'})
                .set('things', 'b', {'title': 'Y'})
                .commit()
            )
        self.assertEqual(self.store.get('things', 'a').data, {'title': 'OLD'})
        self.assertIsNone(self.store.get('things', 'b'))
        self.assertEqual(self.store.revision('things'), before)

    def test_revision_precondition(self):
        current = self.store.revision('things')
        with self.assertRaises(RevisionConflict) as ctx:
            (
                self.store.batch()
                .expect_revision('things', current - 1)
                .delete('things', 'a')
                .commit()
            )
        self.assertEqual(ctx.exception.actual, current)
        self.assertIsNotNone(self.store.get('things', 'a'))

    def test_database_errors_become_unavailable(self):
        with mock.patch.object(StoredDocument.objects, 'filter', side_effect=DatabaseError('gone')):
            with self.assertRaises(StoreUnavailable):
                self.store.get('things', 'a')


class RegistryTests(TestCase):

    @override_settings(DOCUMENT_STORE={'BACKEND': 'docstore.backends.django_orm.DjangoDocumentStore'})
    def test_builds_configured_backend(self):
        store = get_document_store()
        self.assertIsInstance(store, DjangoDocumentStore)
        self.assertIs(store, get_document_store())

    @override_settings(DOCUMENT_STORE={'BACKEND': 'docstore.backends.nope.Missing'})
    def test_bad_backend_path(self):
        with self.assertRaises(ImproperlyConfigured):
            get_document_store()
