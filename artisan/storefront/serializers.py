"""
Django REST Framework serializers for the storefront API.

Incoming catalog rows are validated here and turned into catalog entities
(`Article`, `ShopProduct`, `InternetListing`, `Slide`, `Video`) before they
reach the reconciliation service.
"""

from dataclasses import fields as dataclass_fields

from django.conf import settings
from rest_framework import serializers

from .services.catalog.items import PRODUCT_KINDS, Slide, Video, infer_kind
from .services.catalog.sync_service import CatalogPayload
from .services.subscriptions import PLAN_IDS


def _build(cls, data, extra=None):
    """
    Instantiates a catalog dataclass from validated data; fields that were not
    sent (or sent as null) stay UNSET.
    """
    names = {f.name for f in dataclass_fields(cls)}
    values = {key: value for key, value in data.items() if key in names and value is not None}
    values.update(extra or {})
    return cls(**values)


class ProductSerializer(serializers.Serializer):
    """
    One catalog product of any kind.

    The kind is taken from `kind` or inferred from the category field that is
    present; fields that belong to another kind are dropped.
    """
    id = serializers.CharField(max_length=100)
    kind = serializers.ChoiceField(choices=sorted(PRODUCT_KINDS), required=False)
    title = serializers.CharField(allow_blank=True, required=False, default='')
    description = serializers.CharField(allow_blank=True, required=False, default='')
    media_urls = serializers.ListField(child=serializers.CharField(allow_blank=True), required=False, default=list)
    data_ai_hint = serializers.CharField(allow_blank=True, required=False, default='')
    price = serializers.IntegerField(min_value=0, required=False, default=0)
    original_price = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    is_recommended = serializers.BooleanField(required=False, allow_null=True)
    created_at = serializers.DateTimeField(required=False, allow_null=True)
    likes = serializers.IntegerField(min_value=0, required=False, allow_null=True)

    article_category = serializers.CharField(allow_blank=True, required=False)
    collection = serializers.CharField(allow_blank=True, required=False)
    colors = serializers.ListField(child=serializers.CharField(), required=False)
    sizes = serializers.ListField(child=serializers.CharField(), required=False)
    internet_class = serializers.CharField(allow_blank=True, required=False)
    redirect_url = serializers.CharField(allow_blank=True, required=False)

    def validate(self, attrs):
        kind = attrs.get('kind') or infer_kind(attrs)
        if kind is None:
            raise serializers.ValidationError({'kind': "Type de produit inconnu."})
        attrs['kind'] = kind
        return attrs

    @staticmethod
    def to_item(data):
        return _build(PRODUCT_KINDS[data['kind']], data)


class SlideSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=100)
    title = serializers.CharField(allow_blank=True, required=False, default='')
    subtitle = serializers.CharField(allow_blank=True, required=False, default='')
    image_url = serializers.CharField(allow_blank=True, required=False, default='')
    data_ai_hint = serializers.CharField(allow_blank=True, required=False, default='')

    @staticmethod
    def to_item(data):
        return _build(Slide, data)


class VideoSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=100)
    title = serializers.CharField(allow_blank=True, required=False, default='')
    description = serializers.CharField(allow_blank=True, required=False, default='')
    image_url = serializers.CharField(allow_blank=True, required=False, default='')
    short_preview_url = serializers.CharField(allow_blank=True, required=False, allow_null=True)
    src = serializers.CharField(allow_blank=True, required=False, default='')
    channel = serializers.CharField(allow_blank=True, required=False, default='')
    data_ai_hint = serializers.CharField(allow_blank=True, required=False, default='')
    upload_date = serializers.CharField(allow_blank=True, required=False, default='')
    duration = serializers.IntegerField(min_value=0, required=False, default=0)
    views = serializers.IntegerField(min_value=0, required=False, default=0)
    likes = serializers.IntegerField(min_value=0, required=False, default=0)
    is_paid = serializers.BooleanField(required=False, default=False)
    is_recommended = serializers.BooleanField(required=False, allow_null=True)
    created_at = serializers.DateTimeField(required=False, allow_null=True)

    @staticmethod
    def to_item(data):
        return _build(Video, data)


class CategoryItemSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=100)
    label = serializers.CharField(max_length=200)


class CategoriesSerializer(serializers.Serializer):
    article_categories = CategoryItemSerializer(many=True, required=False)
    product_collections = CategoryItemSerializer(many=True, required=False)
    internet_classes = CategoryItemSerializer(many=True, required=False)
    tv_channels = CategoryItemSerializer(many=True, required=False)


class PaymentMethodSerializer(serializers.Serializer):
    id = serializers.CharField(max_length=100)
    name = serializers.CharField(max_length=100)
    details = serializers.CharField(allow_blank=True, required=False, default='')
    color = serializers.RegexField(r'^#[0-9A-Fa-f]{6}$', required=False, default='#000000')


class SubscriptionPlanSerializer(serializers.Serializer):
    id = serializers.ChoiceField(choices=PLAN_IDS)
    name = serializers.CharField(max_length=100)
    price = serializers.IntegerField(min_value=0)
    features = serializers.ListField(child=serializers.CharField(), required=False, default=list)


def _plain(value):
    """Nested OrderedDicts/ReturnLists to plain dicts and lists."""
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_plain(item) for item in value]
    return value


class CatalogSaveSerializer(serializers.Serializer):
    """
    Payload of the back-office "save" button.

    `revisions` carries the collection revisions the dashboard was loaded at.
    """
    products = ProductSerializer(many=True)
    slides = SlideSerializer(many=True)
    videos = VideoSerializer(many=True)
    categories = CategoriesSerializer(required=False)
    payment_methods = PaymentMethodSerializer(many=True, required=False)
    subscription_plans = serializers.DictField(child=SubscriptionPlanSerializer(), required=False)
    revisions = serializers.DictField(child=serializers.IntegerField(min_value=0), required=False, default=dict)

    def _unique_ids(self, rows):
        ids = [row['id'] for row in rows]
        duplicates = sorted({doc_id for doc_id in ids if ids.count(doc_id) > 1})
        if duplicates:
            raise serializers.ValidationError(f"Identifiants en double : {', '.join(duplicates)}")

    def validate_products(self, value):
        self._unique_ids(value)
        return [ProductSerializer.to_item(row) for row in value]

    def validate_slides(self, value):
        self._unique_ids(value)
        return [SlideSerializer.to_item(row) for row in value]

    def validate_videos(self, value):
        self._unique_ids(value)
        return [VideoSerializer.to_item(row) for row in value]

    def validate_payment_methods(self, value):
        if len(value) > settings.MAX_PAYMENT_METHODS:
            raise serializers.ValidationError(
                f"Vous ne pouvez pas ajouter plus de {settings.MAX_PAYMENT_METHODS} moyens de paiement."
            )
        return _plain(value)

    def validate_subscription_plans(self, value):
        unknown = sorted(set(value) - set(PLAN_IDS))
        if unknown:
            raise serializers.ValidationError(f"Formules inconnues : {', '.join(unknown)}")
        return _plain(value)

    def validate_categories(self, value):
        return _plain(value)

    def to_payload(self):
        data = self.validated_data
        return CatalogPayload(
            products=data['products'],
            slides=data['slides'],
            videos=data['videos'],
            categories=data.get('categories'),
            payment_methods=data.get('payment_methods'),
            subscription_plans=data.get('subscription_plans'),
            revisions=dict(data.get('revisions') or {}),
        )


class ContractSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)
    firstname = serializers.CharField(max_length=100)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=30)
    reason = serializers.CharField()


class FeedbackSerializer(serializers.Serializer):
    text = serializers.CharField(max_length=2000, trim_whitespace=True)


class UploadSerializer(serializers.Serializer):
    file = serializers.FileField()
