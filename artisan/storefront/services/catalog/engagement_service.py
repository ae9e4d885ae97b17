"""
Likes, view counters and paid-video access.
"""
import logging
from datetime import datetime

from django.utils import timezone

from docstore.backends.base import Increment

from .items import PRODUCTS, VIDEOS

logger = logging.getLogger(__name__)

USERS = 'users'


def like_product(store, product_id):
    store.update(PRODUCTS, product_id, {'likes': Increment(1)})


def like_video(store, video_id):
    store.update(VIDEOS, video_id, {'likes': Increment(1)})


def record_video_view(store, video_id):
    store.update(VIDEOS, video_id, {'views': Increment(1)})


def subscription_expiry(store, user):
    """
    Expiry stored on the user's record, or None.
    """
    if user is None or not user.is_authenticated:
        return None
    record = store.get(USERS, str(user.pk))
    if record is None:
        return None
    expiry = record.get('subscription_expiry')
    return expiry if isinstance(expiry, datetime) else None


def has_video_access(store, video, user, now=None):
    if not video.is_paid:
        return True
    expiry = subscription_expiry(store, user)
    if expiry is None:
        return False
    return expiry > (now or timezone.now())
