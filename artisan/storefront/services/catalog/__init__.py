"""
Catalog services: entities, queries, reconciliation and media.
"""

from .categories import CategoryStore
from .items import (
    Article,
    InternetListing,
    Product,
    ShopProduct,
    Slide,
    Video,
    product_from_document,
)
from .sync_service import (
    CatalogPayload,
    InvalidWorkingSet,
    ReconcileResult,
    StaleWorkingSet,
    reconcile_collection,
    save_catalog,
)

__all__ = [
    "Article",
    "CatalogPayload",
    "CategoryStore",
    "InternetListing",
    "InvalidWorkingSet",
    "Product",
    "ReconcileResult",
    "ShopProduct",
    "Slide",
    "StaleWorkingSet",
    "Video",
    "product_from_document",
    "reconcile_collection",
    "save_catalog",
]
