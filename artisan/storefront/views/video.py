"""
TV section: video playback gated by subscription, likes, and the
subscription request page.
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import Http404, JsonResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.views.decorators.http import require_POST

from docstore.exceptions import DocumentNotFound, DocumentStoreError
from docstore.registry import get_document_store

from ..forms import SubscriptionForm
from ..services import subscriptions
from ..services.catalog import engagement_service, query_service
from ..services.site_config import load_payment_methods, load_subscription_plans
from ..tasks import queue_notification
from .utils import store_error_message

logger = logging.getLogger(__name__)


def video_detail(request, video_id):
    store = get_document_store()
    try:
        video = query_service.get_video(store, video_id)
    except DocumentStoreError as exc:
        logger.error("Video %s lookup failed: %s", video_id, exc)
        raise Http404("Vidéo indisponible") from exc
    if video is None:
        raise Http404("Vidéo introuvable")

    try:
        has_access = engagement_service.has_video_access(store, video, request.user)
    except DocumentStoreError as exc:
        logger.error("Access check for video %s failed: %s", video_id, exc)
        has_access = False

    if has_access:
        try:
            engagement_service.record_video_view(store, video.id)
        except DocumentStoreError as exc:
            logger.warning("View counter for video %s not updated: %s", video_id, exc)

    return render(request, 'storefront/video.html', {
        'video': video,
        'has_access': has_access,
        'channel_label': request.category_store.label_for('tv_channels', video.channel),
    })


@require_POST
def video_like(request, video_id):
    try:
        engagement_service.like_video(get_document_store(), video_id)
    except DocumentNotFound:
        raise Http404("Vidéo introuvable")
    except DocumentStoreError as exc:
        logger.error("Like on video %s failed: %s", video_id, exc)
        return JsonResponse({'error': store_error_message(exc)}, status=503)
    return JsonResponse({'success': True})


@login_required
def subscribe(request):
    store = get_document_store()
    try:
        plans = load_subscription_plans(store)
        payment_methods = load_payment_methods(store)
    except DocumentStoreError as exc:
        logger.error("Subscription page data failed to load: %s", exc)
        messages.error(request, store_error_message(exc))
        return redirect('home')

    if request.method == 'POST':
        form = SubscriptionForm(request.POST)
        if form.is_valid():
            try:
                subscription_id = subscriptions.request_subscription(
                    store, request.user,
                    form.cleaned_data['plan'],
                    form.cleaned_data['transaction_id'].strip(),
                )
            except subscriptions.InvalidPlan:
                form.add_error('plan', "Formule inconnue.")
            except DocumentStoreError as exc:
                logger.error("Subscription request failed for user %s: %s", request.user.pk, exc)
                messages.error(request, store_error_message(exc))
            else:
                queue_notification('subscription_request', subscription_id)
                messages.success(
                    request,
                    "Demande envoyée ! Vous bénéficiez d'un accès temporaire pendant la vérification du paiement.",
                )
                return redirect(f"{reverse('discover')}?section=tv")
    else:
        form = SubscriptionForm(initial={'plan': request.GET.get('plan', '1m')})

    return render(request, 'storefront/subscribe.html', {
        'form': form,
        'plans': [plans[plan_id] for plan_id in subscriptions.PLAN_IDS if plan_id in plans],
        'payment_methods': payment_methods,
    })
