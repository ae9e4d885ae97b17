"""
Django REST Framework ViewSets for the storefront API.

Everything is read from and written to the document store; there are no
Django models behind these endpoints.
"""

import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from docstore.registry import get_document_store

from .serializers import (
    CatalogSaveSerializer,
    ContractSerializer,
    FeedbackSerializer,
    UploadSerializer,
)
from .services import contracts, features, orders, subscriptions
from .services.catalog import engagement_service, query_service
from .services.catalog.items import PRODUCTS, SLIDES, VIDEOS
from .services.catalog.media_service import save_upload
from .services.catalog.sync_service import save_catalog
from .services.site_config import load_payment_methods, load_subscription_plans
from .tasks import queue_notification

logger = logging.getLogger('storefront.backoffice')


def _documents(documents):
    return [document.to_dict() for document in documents]


class ProductViewSet(viewsets.ViewSet):
    """
    list: GET /api/products/?kind=shop&category=recommended
    retrieve: GET /api/products/{id}/
    like: POST /api/products/{id}/like/
    """
    permission_classes = [AllowAny]

    def list(self, request):
        products = query_service.list_products(get_document_store(), request.query_params.get('kind'))
        products = query_service.filter_by_category(products, request.query_params.get('category'))
        return Response([product.to_dict() for product in products])

    def retrieve(self, request, pk=None):
        product = query_service.get_product(get_document_store(), pk)
        if product is None:
            return Response({'error': 'Produit introuvable', 'details': pk}, status=status.HTTP_404_NOT_FOUND)
        return Response(product.to_dict())

    @action(detail=True, methods=['post'])
    def like(self, request, pk=None):
        engagement_service.like_product(get_document_store(), pk)
        return Response({'success': True})


class SlideViewSet(viewsets.ViewSet):
    permission_classes = [AllowAny]

    def list(self, request):
        return Response([slide.to_dict() for slide in query_service.list_slides(get_document_store())])


class VideoViewSet(viewsets.ViewSet):
    """
    Paid videos are listed without their `src` unless the caller has access.
    """
    permission_classes = [AllowAny]

    def _public(self, store, video):
        data = video.to_dict()
        access = engagement_service.has_video_access(store, video, self.request.user)
        if not access:
            data.pop('src', None)
        data['has_access'] = access
        return data

    def list(self, request):
        store = get_document_store()
        videos = query_service.filter_by_category(
            query_service.list_videos(store), request.query_params.get('category'),
        )
        return Response([self._public(store, video) for video in videos])

    def retrieve(self, request, pk=None):
        store = get_document_store()
        video = query_service.get_video(store, pk)
        if video is None:
            return Response({'error': 'Vidéo introuvable', 'details': pk}, status=status.HTTP_404_NOT_FOUND)
        return Response(self._public(store, video))

    @action(detail=True, methods=['post'])
    def like(self, request, pk=None):
        engagement_service.like_video(get_document_store(), pk)
        return Response({'success': True})


class ConfigViewSet(viewsets.ViewSet):
    """
    GET /api/config/categories/, /api/config/payment/, /api/config/plans/
    """
    permission_classes = [AllowAny]

    @action(detail=False, methods=['get'])
    def categories(self, request):
        return Response(request.category_store.fetch())

    @action(detail=False, methods=['get'])
    def payment(self, request):
        return Response({'methods': load_payment_methods(get_document_store())})

    @action(detail=False, methods=['get'])
    def plans(self, request):
        return Response(load_subscription_plans(get_document_store()))


class FeatureViewSet(viewsets.ViewSet):

    def get_permissions(self):
        if self.action == 'feedback':
            return [IsAuthenticated()]
        return [AllowAny()]

    def list(self, request):
        return Response(_documents(features.list_features(get_document_store())))

    @action(detail=True, methods=['post'])
    def feedback(self, request, pk=None):
        serializer = FeedbackSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        feedback_id = features.add_feedback(get_document_store(), pk, request.user, serializer.validated_data['text'])
        return Response({'success': True, 'id': feedback_id}, status=status.HTTP_201_CREATED)


class ContractViewSet(viewsets.ViewSet):
    """
    create: anyone may submit a partner request; list: staff only.
    """

    def get_permissions(self):
        if self.action == 'create':
            return [AllowAny()]
        return [IsAdminUser()]

    def create(self, request):
        serializer = ContractSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        contract_id = contracts.submit_contract(get_document_store(), serializer.validated_data)
        queue_notification('new_contract', contract_id)
        return Response({'success': True, 'id': contract_id}, status=status.HTTP_201_CREATED)

    def list(self, request):
        return Response(_documents(contracts.list_contracts(get_document_store())))


class OrderViewSet(viewsets.ViewSet):
    permission_classes = [IsAdminUser]

    def list(self, request):
        return Response(_documents(orders.list_orders(get_document_store())))


class SubscriptionViewSet(viewsets.ViewSet):
    permission_classes = [IsAdminUser]

    def list(self, request):
        return Response(_documents(subscriptions.list_subscriptions(get_document_store())))


class CatalogSaveView(APIView):
    """
    POST /api/catalog/save/: reconcile products, slides and videos and merge
    the config documents. Responds 409 when the dashboard data is stale.
    """
    permission_classes = [IsAdminUser]

    def post(self, request):
        serializer = CatalogSaveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        results = save_catalog(get_document_store(), serializer.to_payload())
        request.category_store.refresh()
        logger.info("Catalog saved by %s", request.user.pk)
        return Response({
            'success': True,
            'revisions': {name: result.revision for name, result in results.items()},
            'deleted': {name: list(result.deleted) for name, result in results.items()},
        })

    def get(self, request):
        store = get_document_store()
        return Response({
            'revisions': {name: store.revision(name) for name in (PRODUCTS, SLIDES, VIDEOS)},
        })


class UploadView(APIView):
    permission_classes = [IsAdminUser]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        if 'file' not in request.FILES:
            return Response({'error': 'Aucun fichier fourni.', 'details': None}, status=status.HTTP_400_BAD_REQUEST)
        serializer = UploadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        url = save_upload(serializer.validated_data['file'])
        return Response({'success': True, 'url': url})
