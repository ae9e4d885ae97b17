import logging

from django.utils import timezone
from social_core.exceptions import AuthException

from docstore.exceptions import DocumentStoreError
from docstore.registry import get_document_store

logger = logging.getLogger(__name__)

USERS = 'users'


def require_email(strategy, details, backend, user=None, social=None, *args, **kwargs):
    """Google sign-in without an email address is refused."""
    if backend.name == 'google-oauth2':
        if not details.get('email'):
            raise AuthException(backend, 'Email is required for registration')
    return kwargs


def ensure_user_record(strategy, details, backend, user=None, social=None, *args, **kwargs):
    """
    Creates the user's document (subscription expiry holder) on first sign-in.
    """
    if not user:
        return
    ensure_user_document(user)


def ensure_user_document(user):
    store = get_document_store()
    try:
        if store.get(USERS, str(user.pk)) is None:
            store.set(USERS, str(user.pk), {
                'email': user.email or '',
                'created_at': timezone.now(),
            }, merge=True)
    except DocumentStoreError as exc:
        logger.warning("Could not create user record for %s: %s", user.pk, exc)
