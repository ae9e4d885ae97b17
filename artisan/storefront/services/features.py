"""
Upcoming features and the feedback users leave on them.
"""
import logging
import uuid

from django.utils import timezone

from docstore.backends.base import ArrayUnion
from docstore.exceptions import DocumentNotFound

logger = logging.getLogger(__name__)

FEATURES = 'features'


def list_features(store):
    return store.list(FEATURES, order_by='created_at', descending=True)


def add_feedback(store, feature_id, user, text):
    """
    Appends a feedback entry; returns its ID.
    """
    text = (text or '').strip()
    if not text:
        raise ValueError("feedback text is empty")
    entry = {
        'id': uuid.uuid4().hex,
        'author_id': str(user.pk),
        'author_email': user.email or '',
        'text': text,
        'created_at': timezone.now(),
    }
    store.update(FEATURES, feature_id, {'feedback': ArrayUnion(entry)})
    return entry['id']


def reply_to_feedback(store, feature_id, feedback_id, reply):
    """
    Sets `admin_reply` on one feedback entry.

    The feedback list is rewritten as a whole; the collection revision guards
    against a concurrent append being lost.
    """
    revision = store.revision(FEATURES)
    document = store.get(FEATURES, feature_id)
    if document is None:
        raise DocumentNotFound(FEATURES, feature_id)
    feedback = [dict(entry) for entry in document.get('feedback') or []]
    for entry in feedback:
        if entry.get('id') == feedback_id:
            entry['admin_reply'] = reply.strip()
            break
    else:
        raise DocumentNotFound(FEATURES, f"{feature_id}#{feedback_id}")
    store.batch().update(FEATURES, feature_id, {'feedback': feedback}).expect_revision(FEATURES, revision).commit()
    logger.info("Replied to feedback %s on feature %s", feedback_id, feature_id)
