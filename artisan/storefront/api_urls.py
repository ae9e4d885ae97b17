"""
Django REST Framework API URLs.
"""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .viewsets import (
    CatalogSaveView,
    ConfigViewSet,
    ContractViewSet,
    FeatureViewSet,
    OrderViewSet,
    ProductViewSet,
    SlideViewSet,
    SubscriptionViewSet,
    UploadView,
    VideoViewSet,
)

router = DefaultRouter()
router.register(r'products', ProductViewSet, basename='api-product')
router.register(r'slides', SlideViewSet, basename='api-slide')
router.register(r'videos', VideoViewSet, basename='api-video')
router.register(r'config', ConfigViewSet, basename='api-config')
router.register(r'features', FeatureViewSet, basename='api-feature')
router.register(r'contracts', ContractViewSet, basename='api-contract')
router.register(r'orders', OrderViewSet, basename='api-order')
router.register(r'subscriptions', SubscriptionViewSet, basename='api-subscription')

urlpatterns = [
    path('catalog/save/', CatalogSaveView.as_view(), name='api-catalog-save'),
    path('upload/', UploadView.as_view(), name='api-upload'),
    path('', include(router.urls)),
]
