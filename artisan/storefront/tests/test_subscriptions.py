"""
Unit tests for TV subscriptions and paid-video access.

Tests:
- add_months / plan_expiry
- request_subscription: pending record and grace window
- confirm_subscription / delete_subscription / expire_subscriptions
- has_video_access and the video page view counter
- subscribe view
"""
from datetime import datetime, timedelta, timezone as dt_timezone

from django.contrib.auth.models import User
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from docstore.registry import get_document_store

from storefront.services import subscriptions
from storefront.services.catalog.engagement_service import has_video_access
from storefront.services.catalog.items import VIDEOS, Video
from storefront.services.subscriptions import (
    EPOCH,
    InvalidPlan,
    STATUS_ACTIVE,
    STATUS_EXPIRED,
    STATUS_PENDING,
    SUBSCRIPTIONS,
    USERS,
    add_months,
    plan_expiry,
)

NOW = datetime(2024, 1, 31, 12, 0, tzinfo=dt_timezone.utc)


class PlanExpiryTests(TestCase):

    def test_add_months_clamps_to_month_end(self):
        self.assertEqual(add_months(NOW, 1), datetime(2024, 2, 29, 12, 0, tzinfo=dt_timezone.utc))
        self.assertEqual(add_months(datetime(2023, 12, 15, tzinfo=dt_timezone.utc), 1),
                         datetime(2024, 1, 15, tzinfo=dt_timezone.utc))

    def test_plan_durations(self):
        self.assertEqual(plan_expiry('24h', NOW), NOW + timedelta(days=1))
        self.assertEqual(plan_expiry('1w', NOW), NOW + timedelta(days=7))
        with self.assertRaises(InvalidPlan):
            plan_expiry('1y', NOW)


@override_settings(SUBSCRIPTION_GRACE_HOURS=5)
class SubscriptionLifecycleTests(TestCase):

    def setUp(self):
        self.store = get_document_store()
        self.user = User.objects.create_user(username='moussa', email='moussa@example.com', password='x')

    def expiry(self):
        return self.store.get(USERS, str(self.user.pk)).get('subscription_expiry')

    def test_request_grants_grace_window(self):
        subscription_id = subscriptions.request_subscription(self.store, self.user, '1m', 'TX message', now=NOW)

        subscription = self.store.get(SUBSCRIPTIONS, subscription_id)
        self.assertEqual(subscription.get('status'), STATUS_PENDING)
        self.assertEqual(subscription.get('amount'), 15000)
        self.assertEqual(subscription.get('user_email'), 'moussa@example.com')
        self.assertEqual(self.expiry(), NOW + timedelta(hours=5))

    def test_request_does_not_shorten_longer_access(self):
        later = NOW + timedelta(days=20)
        self.store.set(USERS, str(self.user.pk), {'subscription_expiry': later})
        subscriptions.request_subscription(self.store, self.user, '24h', 'TX message', now=NOW)
        self.assertEqual(self.expiry(), later)

    def test_request_unknown_plan(self):
        with self.assertRaises(InvalidPlan):
            subscriptions.request_subscription(self.store, self.user, '1y', 'TX message', now=NOW)
        self.assertEqual(self.store.list(SUBSCRIPTIONS), [])

    def test_confirm_sets_expiry(self):
        subscription_id = subscriptions.request_subscription(self.store, self.user, '1w', 'TX message', now=NOW)
        expiry = subscriptions.confirm_subscription(self.store, subscription_id, now=NOW)

        self.assertEqual(expiry, NOW + timedelta(days=7))
        self.assertEqual(self.expiry(), expiry)
        subscription = self.store.get(SUBSCRIPTIONS, subscription_id)
        self.assertEqual(subscription.get('status'), STATUS_ACTIVE)
        self.assertEqual(subscription.get('start_date'), NOW)

    def test_delete_revokes_access(self):
        subscription_id = subscriptions.request_subscription(self.store, self.user, '1w', 'TX message', now=NOW)
        subscriptions.delete_subscription(self.store, subscription_id)
        self.assertEqual(self.expiry(), EPOCH)
        self.assertIsNone(self.store.get(SUBSCRIPTIONS, subscription_id))

    def test_expire_sweep(self):
        active = subscriptions.request_subscription(self.store, self.user, '24h', 'TX message', now=NOW)
        subscriptions.confirm_subscription(self.store, active, now=NOW)
        pending = subscriptions.request_subscription(self.store, self.user, '24h', 'TX message', now=NOW)

        self.assertEqual(subscriptions.expire_subscriptions(self.store, now=NOW + timedelta(hours=1)), 0)
        self.assertEqual(subscriptions.expire_subscriptions(self.store, now=NOW + timedelta(days=2)), 1)
        self.assertEqual(self.store.get(SUBSCRIPTIONS, active).get('status'), STATUS_EXPIRED)
        self.assertEqual(self.store.get(SUBSCRIPTIONS, pending).get('status'), STATUS_PENDING)

    def test_expire_command(self):
        subscription_id = subscriptions.request_subscription(self.store, self.user, '24h', 'TX message')
        subscriptions.confirm_subscription(self.store, subscription_id, now=timezone.now() - timedelta(days=3))
        call_command('expire_subscriptions', verbosity=0)
        self.assertEqual(self.store.get(SUBSCRIPTIONS, subscription_id).get('status'), STATUS_EXPIRED)


class VideoAccessTests(TestCase):

    def setUp(self):
        cache.clear()
        self.store = get_document_store()
        self.user = User.objects.create_user(username='fatou', email='fatou@example.com', password='x')
        self.free = Video(id='free', title='Gratuit', is_paid=False)
        self.paid = Video(id='paid', title='Premium', is_paid=True, src='https://cdn.example.com/p.mp4')
        for video in (self.free, self.paid):
            self.store.set(VIDEOS, video.id, video.to_document())

    def test_free_video_is_open_to_everyone(self):
        self.assertTrue(has_video_access(self.store, self.free, None))

    def test_paid_video_needs_unexpired_subscription(self):
        self.assertFalse(has_video_access(self.store, self.paid, self.user, now=NOW))
        self.store.set(USERS, str(self.user.pk), {'subscription_expiry': NOW + timedelta(minutes=1)})
        self.assertTrue(has_video_access(self.store, self.paid, self.user, now=NOW))
        self.assertFalse(has_video_access(self.store, self.paid, self.user, now=NOW + timedelta(minutes=1)))

    def test_view_counter_only_counts_access(self):
        self.client.get(reverse('video_detail', args=['paid']))
        self.assertEqual(self.store.get(VIDEOS, 'paid').get('views'), 0)

        self.client.get(reverse('video_detail', args=['free']))
        self.assertEqual(self.store.get(VIDEOS, 'free').get('views'), 1)

    def test_subscriber_sees_paid_video(self):
        self.store.set(USERS, str(self.user.pk), {'subscription_expiry': timezone.now() + timedelta(days=1)})
        self.client.force_login(self.user)
        response = self.client.get(reverse('video_detail', args=['paid']))
        self.assertTrue(response.context['has_access'])
        self.assertEqual(self.store.get(VIDEOS, 'paid').get('views'), 1)

    def test_unknown_video(self):
        self.assertEqual(self.client.get(reverse('video_detail', args=['nope'])).status_code, 404)

    def test_like_video(self):
        response = self.client.post(reverse('video_like', args=['free']))
        self.assertEqual(response.json(), {'success': True})
        self.assertEqual(self.store.get(VIDEOS, 'free').get('likes'), 1)


class SubscribeViewTests(TestCase):

    def setUp(self):
        cache.clear()
        self.store = get_document_store()
        self.user = User.objects.create_user(username='ibou', email='ibou@example.com', password='x')
        self.client.force_login(self.user)

    def test_short_transaction_message_is_refused(self):
        response = self.client.post(reverse('subscribe'), {'plan': '1m', 'transaction_id': 'short'})
        self.assertEqual(response.status_code, 200)
        self.assertIn('transaction_id', response.context['form'].errors)
        self.assertEqual(self.store.list(SUBSCRIPTIONS), [])

    def test_request_redirects_to_tv(self):
        response = self.client.post(reverse('subscribe'), {
            'plan': '1m', 'transaction_id': 'Transfert de 15000 FCFA reçu, ref 123',
        })
        self.assertRedirects(response, f"{reverse('discover')}?section=tv")
        self.assertEqual(len(self.store.list(SUBSCRIPTIONS)), 1)
        expiry = self.store.get(USERS, str(self.user.pk)).get('subscription_expiry')
        self.assertGreater(expiry, timezone.now())
