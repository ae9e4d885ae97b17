"""
DRF exception handler: every API error is returned as
``{"error": <message>, "details": <detail>}``.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from docstore.exceptions import (
    DocumentNotFound,
    DocumentStoreError,
    PermissionDeniedError,
    RevisionConflict,
    StoreUnavailable,
)

from .services.catalog.sync_service import InvalidWorkingSet
from .views.utils import store_error_message

logger = logging.getLogger(__name__)

STORE_ERROR_STATUS = (
    (PermissionDeniedError, status.HTTP_403_FORBIDDEN),
    (RevisionConflict, status.HTTP_409_CONFLICT),
    (DocumentNotFound, status.HTTP_404_NOT_FOUND),
    (StoreUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (DocumentStoreError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def _store_error_response(exc):
    for error_class, http_status in STORE_ERROR_STATUS:
        if isinstance(exc, error_class):
            break
    details = {'code': exc.code, 'message': str(exc)}
    if isinstance(exc, RevisionConflict):
        details.update({'collection': exc.collection, 'expected': exc.expected, 'actual': exc.actual})
    return Response({'error': store_error_message(exc), 'details': details}, status=http_status)


def api_exception_handler(exc, context):
    if isinstance(exc, DocumentStoreError):
        logger.error("API store error in %s: %s", context.get('view').__class__.__name__, exc)
        return _store_error_response(exc)
    if isinstance(exc, InvalidWorkingSet):
        return Response({'error': "Données invalides", 'details': str(exc)}, status=status.HTTP_400_BAD_REQUEST)

    response = exception_handler(exc, context)
    if response is None:
        return None
    if response.status_code == status.HTTP_400_BAD_REQUEST:
        response.data = {'error': "Données invalides", 'details': response.data}
    else:
        detail = response.data.get('detail', '') if isinstance(response.data, dict) else response.data
        response.data = {'error': str(detail), 'details': response.data}
    return response
