"""
Catalog entities stored in the `products`, `slides` and `videos` collections.

Products are a tagged union: each document carries a `kind` and only the
fields of that kind. Optional fields default to UNSET and are left out of the
stored document.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Dict, List, Optional

from docstore.backends.base import UNSET, strip_unset

PRODUCTS = 'products'
SLIDES = 'slides'
VIDEOS = 'videos'


def _document_fields(instance) -> Dict[str, Any]:
    return strip_unset({f.name: getattr(instance, f.name) for f in fields(instance) if f.name != 'id'})


def _known_fields(cls, data):
    names = {f.name for f in fields(cls)} - {"id"}
    return {key: value for key, value in data.items() if key in names}


@dataclass
class Product:
    """
    Fields shared by every catalog kind.
    """
    kind: ClassVar[str] = ''

    id: str
    title: str = ''
    description: str = ''
    media_urls: List[str] = field(default_factory=list)
    data_ai_hint: str = ''
    price: int = 0
    original_price: Any = UNSET
    is_recommended: Any = UNSET
    created_at: Any = UNSET
    likes: Any = UNSET

    @property
    def category(self) -> str:
        return ''

    @property
    def image_url(self) -> str:
        return self.media_urls[0] if self.media_urls else ''

    def to_document(self) -> Dict[str, Any]:
        return {'kind': self.kind, **_document_fields(self)}

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, **self.to_document()}


@dataclass
class Article(Product):
    kind: ClassVar[str] = 'article'

    article_category: str = ''

    @property
    def category(self):
        return self.article_category


@dataclass
class ShopProduct(Product):
    kind: ClassVar[str] = 'shop'

    collection: str = ''
    colors: List[str] = field(default_factory=list)
    sizes: List[str] = field(default_factory=list)

    @property
    def category(self):
        return self.collection


@dataclass
class InternetListing(Product):
    kind: ClassVar[str] = 'internet'

    internet_class: str = ''
    redirect_url: str = ''

    @property
    def category(self):
        return self.internet_class


PRODUCT_KINDS = {cls.kind: cls for cls in (Article, ShopProduct, InternetListing)}


def infer_kind(data: Dict[str, Any]) -> Optional[str]:
    """
    Kind of a product document; untagged documents are recognised by their
    category field.
    """
    kind = data.get('kind')
    if kind in PRODUCT_KINDS:
        return kind
    if data.get('collection'):
        return ShopProduct.kind
    if data.get('internet_class'):
        return InternetListing.kind
    if data.get('article_category'):
        return Article.kind
    return None


def product_from_document(doc_id: str, data: Dict[str, Any]) -> Product:
    kind = infer_kind(data) or Article.kind
    cls = PRODUCT_KINDS[kind]
    return cls(id=doc_id, **_known_fields(cls, data))


@dataclass
class Slide:
    id: str
    title: str = ''
    subtitle: str = ''
    image_url: str = ''
    data_ai_hint: str = ''

    def to_document(self):
        return _document_fields(self)

    def to_dict(self):
        return {'id': self.id, **self.to_document()}

    @classmethod
    def from_document(cls, doc_id, data):
        return cls(id=doc_id, **_known_fields(cls, data))


@dataclass
class Video:
    id: str
    title: str = ''
    description: str = ''
    image_url: str = ''
    src: str = ''
    channel: str = ''
    data_ai_hint: str = ''
    upload_date: str = ''
    duration: int = 0
    views: int = 0
    likes: int = 0
    is_paid: bool = False
    short_preview_url: Any = UNSET
    is_recommended: Any = UNSET
    created_at: Any = UNSET

    def to_document(self):
        return _document_fields(self)

    def to_dict(self):
        return {'id': self.id, **self.to_document()}

    @classmethod
    def from_document(cls, doc_id, data):
        return cls(id=doc_id, **_known_fields(cls, data))
