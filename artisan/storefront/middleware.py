from django.conf import settings
from django.core.cache import caches

from docstore.registry import get_document_store

from .services.catalog.categories import CategoryStore


class CategoryStoreMiddleware:
    """
    Builds the shared CategoryStore once and attaches it to every request.
    """

    def __init__(self, get_response):
        self.get_response = get_response
        self.category_store = CategoryStore(
            get_document_store(),
            caches[settings.CATEGORY_CACHE_ALIAS],
            timeout=settings.CATEGORY_CACHE_TIMEOUT,
        )

    def __call__(self, request):
        request.category_store = self.category_store
        return self.get_response(request)
