"""
TV subscriptions.

A request creates a pending subscription and opens a short grace window on
the user's record so playback works while staff check the payment.
Confirmation sets the real expiry; deletion revokes access.
"""
from __future__ import annotations

import calendar
import logging
from datetime import datetime, timedelta, timezone as dt_timezone

from django.conf import settings
from django.utils import timezone

from docstore.backends.base import SERVER_TIMESTAMP
from docstore.exceptions import DocumentNotFound

from .site_config import load_subscription_plans

logger = logging.getLogger(__name__)

SUBSCRIPTIONS = 'subscriptions'
USERS = 'users'

STATUS_PENDING = 'pending'
STATUS_ACTIVE = 'active'
STATUS_EXPIRED = 'expired'

PLAN_IDS = ('24h', '1w', '1m')

EPOCH = datetime(1970, 1, 1, tzinfo=dt_timezone.utc)


class InvalidPlan(ValueError):
    pass


def add_months(moment: datetime, months: int) -> datetime:
    """
    Same day and time `months` later, clamped to the end of shorter months.
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def plan_expiry(plan_id: str, start: datetime) -> datetime:
    if plan_id == '24h':
        return start + timedelta(days=1)
    if plan_id == '1w':
        return start + timedelta(days=7)
    if plan_id == '1m':
        return add_months(start, 1)
    raise InvalidPlan(plan_id)


def list_subscriptions(store):
    return store.list(SUBSCRIPTIONS, order_by='created_at', descending=True)


def request_subscription(store, user, plan_id, transaction_id, now=None):
    """
    Records a pending subscription and grants the grace window in one batch.

    An existing expiry later than the grace window is left alone.
    Returns the new subscription ID.
    """
    plans = load_subscription_plans(store)
    if plan_id not in PLAN_IDS or plan_id not in plans:
        raise InvalidPlan(plan_id)

    now = now or timezone.now()
    grace_until = now + timedelta(hours=settings.SUBSCRIPTION_GRACE_HOURS)
    user_key = str(user.pk)
    record = store.get(USERS, user_key)
    current = record.get('subscription_expiry') if record else None

    subscription_id = store.new_id()
    batch = store.batch()
    batch.set(SUBSCRIPTIONS, subscription_id, {
        'user_id': user_key,
        'user_email': user.email or '',
        'plan': plan_id,
        'amount': plans[plan_id].get('price', 0),
        'transaction_id': transaction_id,
        'created_at': SERVER_TIMESTAMP,
        'status': STATUS_PENDING,
    })
    if not isinstance(current, datetime) or current < grace_until:
        batch.set(USERS, user_key, {'subscription_expiry': grace_until}, merge=True)
    batch.commit()

    logger.info("Subscription %s requested by user %s (plan %s)", subscription_id, user_key, plan_id)
    return subscription_id


def _subscription(store, subscription_id):
    document = store.get(SUBSCRIPTIONS, subscription_id)
    if document is None:
        raise DocumentNotFound(SUBSCRIPTIONS, subscription_id)
    return document


def confirm_subscription(store, subscription_id, now=None):
    """
    Activates a subscription; returns the new expiry.
    """
    document = _subscription(store, subscription_id)
    now = now or timezone.now()
    expiry = plan_expiry(document.get('plan'), now)

    batch = store.batch()
    batch.set(USERS, str(document.get('user_id')), {'subscription_expiry': expiry}, merge=True)
    batch.update(SUBSCRIPTIONS, subscription_id, {
        'status': STATUS_ACTIVE,
        'start_date': now,
        'expiry_date': expiry,
    })
    batch.commit()
    logger.info("Subscription %s confirmed until %s", subscription_id, expiry.isoformat())
    return expiry


def delete_subscription(store, subscription_id):
    """
    Revokes access (expiry set to the epoch) and removes the subscription.
    """
    document = _subscription(store, subscription_id)
    batch = store.batch()
    batch.set(USERS, str(document.get('user_id')), {'subscription_expiry': EPOCH}, merge=True)
    batch.delete(SUBSCRIPTIONS, subscription_id)
    batch.commit()
    logger.info("Subscription %s deleted", subscription_id)


def expire_subscriptions(store, now=None):
    """
    Marks active subscriptions whose expiry has passed as expired.

    Returns the number of subscriptions changed.
    """
    now = now or timezone.now()
    batch = store.batch()
    for document in store.list(SUBSCRIPTIONS):
        expiry = document.get('expiry_date')
        if document.get('status') == STATUS_ACTIVE and isinstance(expiry, datetime) and expiry <= now:
            batch.update(SUBSCRIPTIONS, document.id, {'status': STATUS_EXPIRED})
    expired = len(batch)
    batch.commit()
    if expired:
        logger.info("Expired %d subscriptions", expired)
    return expired
