"""
Category lists shared by every page (filters, navigation, back-office
selects).

`CategoryStore` is created once by `CategoryStoreMiddleware` and handed to
views as `request.category_store`. The lists live in the Django cache, so all
worker processes see a refresh.
"""
import copy
import logging

from docstore.exceptions import DocumentStoreError

from ..site_config import DEFAULT_CATEGORIES, load_categories

logger = logging.getLogger(__name__)

CACHE_KEY = 'storefront:categories'


class CategoryStore:

    def __init__(self, document_store, cache, timeout=600):
        self.document_store = document_store
        self.cache = cache
        self.timeout = timeout
        self.error = None

    def fetch(self):
        """
        Cached categories, loading them on a miss.
        """
        categories = self.cache.get(CACHE_KEY)
        if categories is not None:
            return categories
        return self._load()

    def refresh(self):
        """
        Drops the cached lists and reloads them from the document store.
        """
        self.cache.delete(CACHE_KEY)
        return self._load()

    def _load(self):
        try:
            categories = load_categories(self.document_store)
        except DocumentStoreError as exc:
            logger.warning("Could not load categories, using defaults: %s", exc)
            self.error = str(exc)
            return copy.deepcopy(DEFAULT_CATEGORIES)
        self.error = None
        self.cache.set(CACHE_KEY, categories, self.timeout)
        return categories

    def labels(self, group):
        return {item['id']: item['label'] for item in self.fetch().get(group, [])}

    def label_for(self, group, category_id):
        return self.labels(group).get(category_id, category_id)
