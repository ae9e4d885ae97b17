"""
Partner contract requests and feature feedback.
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect, render
from django.views.decorators.http import require_POST

from docstore.exceptions import DocumentNotFound, DocumentStoreError
from docstore.registry import get_document_store

from ..forms import ContractForm, FeedbackForm
from ..services import contracts, features
from ..tasks import queue_notification
from .utils import store_error_message

logger = logging.getLogger(__name__)


def contact(request):
    """
    Partner contract form; an internet listing page posts here too.
    """
    if request.method == 'POST':
        form = ContractForm(request.POST)
        if form.is_valid():
            try:
                contract_id = contracts.submit_contract(get_document_store(), form.cleaned_data)
            except contracts.MissingFields as exc:
                for field in exc.fields:
                    form.add_error(field, "Ce champ est obligatoire.")
            except DocumentStoreError as exc:
                logger.error("Contract submission failed: %s", exc)
                messages.error(request, store_error_message(exc))
            else:
                queue_notification('new_contract', contract_id)
                messages.success(request, "Votre demande a bien été envoyée. Nous vous recontacterons rapidement.")
                return redirect('contact')
    else:
        form = ContractForm()
    return render(request, 'storefront/contact.html', {'form': form})


def feature_list(request):
    items = []
    try:
        items = features.list_features(get_document_store())
    except DocumentStoreError as exc:
        logger.error("Features failed to load: %s", exc)
        messages.error(request, store_error_message(exc))
    return render(request, 'storefront/features.html', {
        'features': [feature.to_dict() for feature in items],
        'form': FeedbackForm(),
    })


@login_required
@require_POST
def feature_feedback(request, feature_id):
    form = FeedbackForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Le message ne peut pas être vide.")
        return redirect('features')
    try:
        features.add_feedback(get_document_store(), feature_id, request.user, form.cleaned_data['text'])
    except DocumentNotFound:
        messages.error(request, "Fonctionnalité introuvable.")
    except DocumentStoreError as exc:
        logger.error("Feedback on feature %s failed: %s", feature_id, exc)
        messages.error(request, store_error_message(exc))
    else:
        messages.success(request, "Merci pour votre avis !")
    return redirect('features')
