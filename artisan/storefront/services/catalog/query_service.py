"""
Read-side helpers for catalog pages.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from docstore.backends.base import DocumentStore

from .items import (
    Article,
    InternetListing,
    PRODUCTS,
    Product,
    SLIDES,
    ShopProduct,
    Slide,
    VIDEOS,
    Video,
    product_from_document,
)

ALL = 'all'
RECOMMENDED = 'recommended'

DISCOVER_SECTIONS = {
    'shop': ShopProduct.kind,
    'internet': InternetListing.kind,
    'tv': None,
}
DEFAULT_SECTION = 'shop'


def list_products(store: DocumentStore, kind: Optional[str] = None) -> List[Product]:
    """
    Products newest first, optionally restricted to one kind.
    """
    products = [
        product_from_document(doc.id, doc.data)
        for doc in store.list(PRODUCTS, order_by='created_at', descending=True)
    ]
    if kind:
        products = [product for product in products if product.kind == kind]
    return products


def get_product(store: DocumentStore, product_id: str, kind: Optional[str] = None) -> Optional[Product]:
    if not product_id:
        return None
    document = store.get(PRODUCTS, product_id)
    if document is None:
        return None
    product = product_from_document(document.id, document.data)
    if kind and product.kind != kind:
        return None
    return product


def get_products(store: DocumentStore, product_ids: Iterable[str]) -> Dict[str, Product]:
    found = {}
    for product_id in product_ids:
        product = get_product(store, product_id)
        if product is not None:
            found[product_id] = product
    return found


def filter_by_category(items, category):
    """
    Applies a discover/home sub-filter: 'all', 'recommended' or a category ID.
    """
    if not category or category == ALL:
        return list(items)
    if category == RECOMMENDED:
        return [item for item in items if item.is_recommended is True]
    return [item for item in items if _category_of(item) == category]


def _category_of(item):
    if isinstance(item, Video):
        return item.channel
    return item.category


def list_slides(store: DocumentStore) -> List[Slide]:
    return [Slide.from_document(doc.id, doc.data) for doc in store.list(SLIDES)]


def list_videos(store: DocumentStore) -> List[Video]:
    return [
        Video.from_document(doc.id, doc.data)
        for doc in store.list(VIDEOS, order_by='created_at', descending=True)
    ]


def get_video(store: DocumentStore, video_id: str) -> Optional[Video]:
    document = store.get(VIDEOS, video_id) if video_id else None
    if document is None:
        return None
    return Video.from_document(document.id, document.data)


def home_listing(store: DocumentStore, category: str = ALL):
    return {
        'slides': list_slides(store),
        'articles': filter_by_category(list_products(store, Article.kind), category),
    }


def discover_listing(store: DocumentStore, section: str = DEFAULT_SECTION, category: str = ALL):
    """
    Items of one discover section after the sub-filter.

    Unknown sections fall back to the shop.
    """
    if section not in DISCOVER_SECTIONS:
        section = DEFAULT_SECTION
    if section == 'tv':
        items = list_videos(store)
    else:
        items = list_products(store, DISCOVER_SECTIONS[section])
    return section, filter_by_category(items, category)
