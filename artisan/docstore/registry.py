"""
Builds the configured document store.

    DOCUMENT_STORE = {
        'BACKEND': 'docstore.backends.django_orm.DjangoDocumentStore',
        'OPTIONS': {},
    }

Stores are cached per configuration, so `override_settings` in tests gets a
fresh instance.
"""
import logging

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)

DEFAULT_BACKEND = 'docstore.backends.django_orm.DjangoDocumentStore'

_stores = {}


def _config_key(config):
    options = config.get('OPTIONS') or {}
    return (config.get('BACKEND', DEFAULT_BACKEND), tuple(sorted((k, repr(v)) for k, v in options.items())))


def get_document_store():
    config = getattr(settings, 'DOCUMENT_STORE', None) or {}
    key = _config_key(config)
    store = _stores.get(key)
    if store is None:
        backend_path = config.get('BACKEND', DEFAULT_BACKEND)
        try:
            backend_class = import_string(backend_path)
        except ImportError as exc:
            raise ImproperlyConfigured(f"Cannot import document store backend {backend_path!r}: {exc}") from exc
        store = backend_class(**(config.get('OPTIONS') or {}))
        logger.info("Document store initialised: %s", backend_path)
        _stores[key] = store
    return store
