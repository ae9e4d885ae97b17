"""
Staff back-office: catalog editing dashboard, orders, partner contracts,
subscriptions and feature feedback.

The dashboard edits the catalog client-side, one row form per item or a JSON
map for categories and plan prices, and saves it through
`/api/catalog/save/`; the list actions below are plain form posts.
"""

import logging

from django.conf import settings
from django.contrib import messages
from django.contrib.admin.views.decorators import staff_member_required
from django.shortcuts import redirect, render
from django.urls import reverse
from django.views.decorators.http import require_POST

from docstore.exceptions import DocumentStoreError
from docstore.registry import get_document_store

from ..forms import ReplyForm, StatusForm
from ..services import contracts, features, orders, subscriptions
from ..services.catalog import query_service
from ..services.catalog.items import PRODUCTS, SLIDES, VIDEOS
from ..services.site_config import load_payment_methods, load_subscription_plans
from .utils import store_error_message

logger = logging.getLogger('storefront.backoffice')

TABS = (
    ('articles', 'Articles (Blog)'),
    ('products', 'Produits (Boutique)'),
    ('internet', 'Produits (Internet)'),
    ('tv', 'Contenus (TV)'),
    ('slides', 'Slides Carrousel'),
    ('contracts', 'Contrats Partenaires'),
    ('orders', 'Commandes'),
    ('subscriptions', 'Abonnements TV'),
    ('subscription_prices', 'Prix des Abonnements'),
    ('categories', 'Catégories & Filtres'),
    ('payment', 'Moyens de Paiement'),
    ('features', 'Fonctionnalités'),
)


def _field(name, label, widget='text', options=None):
    return {'name': name, 'label': label, 'widget': widget, 'options': options}


_RECOMMENDED = _field('is_recommended', 'Recommandé', 'checkbox')
_MEDIA = _field('media_urls', 'Médias (une URL par ligne)', 'list')

# Tabs edited as rows of one catalog section. `kind` tags new product rows
# and selects which rows of `products` the tab shows.
ROW_EDITORS = {
    'articles': {
        'section': 'products',
        'kind': 'article',
        'fields': [
            _field('title', 'Titre'),
            _field('description', 'Contenu', 'textarea'),
            _field('article_category', 'Catégorie', 'select', 'article_categories'),
            _MEDIA,
            _RECOMMENDED,
        ],
    },
    'products': {
        'section': 'products',
        'kind': 'shop',
        'fields': [
            _field('title', 'Titre'),
            _field('description', 'Description', 'textarea'),
            _field('price', 'Prix (FCFA)', 'number'),
            _field('original_price', 'Prix barré (FCFA)', 'number'),
            _field('collection', 'Collection', 'select', 'product_collections'),
            _field('colors', 'Couleurs (une par ligne)', 'list'),
            _field('sizes', 'Tailles (une par ligne)', 'list'),
            _MEDIA,
            _RECOMMENDED,
        ],
    },
    'internet': {
        'section': 'products',
        'kind': 'internet',
        'fields': [
            _field('title', 'Titre'),
            _field('description', 'Description', 'textarea'),
            _field('price', 'Prix (FCFA)', 'number'),
            _field('internet_class', 'Classe', 'select', 'internet_classes'),
            _field('redirect_url', 'Lien de redirection'),
            _MEDIA,
            _RECOMMENDED,
        ],
    },
    'tv': {
        'section': 'videos',
        'kind': '',
        'fields': [
            _field('title', 'Titre'),
            _field('description', 'Description', 'textarea'),
            _field('channel', 'Chaîne', 'select', 'tv_channels'),
            _field('image_url', 'Image'),
            _field('src', 'Vidéo'),
            _field('short_preview_url', 'Aperçu court'),
            _field('upload_date', 'Date de mise en ligne'),
            _field('duration', 'Durée (secondes)', 'number'),
            _field('is_paid', 'Réservé aux abonnés', 'checkbox'),
            _RECOMMENDED,
        ],
    },
    'slides': {
        'section': 'slides',
        'kind': '',
        'fields': [
            _field('title', 'Titre'),
            _field('subtitle', 'Sous-titre'),
            _field('image_url', 'Image'),
            _field('data_ai_hint', 'Mots-clés image'),
        ],
    },
    'payment': {
        'section': 'payment_methods',
        'kind': '',
        'fields': [
            _field('name', 'Nom'),
            _field('details', 'Coordonnées'),
            _field('color', 'Couleur', 'color'),
        ],
    },
}

# Tabs whose section is a single map, edited as JSON.
JSON_SECTIONS = {
    'categories': 'categories',
    'subscription_prices': 'subscription_plans',
}


def _editor_for(tab):
    editor = ROW_EDITORS.get(tab)
    if editor is None:
        return None
    max_rows = settings.MAX_PAYMENT_METHODS if editor['section'] == 'payment_methods' else None
    return {**editor, 'max_rows': max_rows}


def _dashboard(tab):
    return redirect(f"{reverse('admin_dashboard')}?tab={tab}")


def _build_dashboard_context(store, category_store):
    """
    Working sets plus the revisions they were read at.

    Revisions are read before the collections so a concurrent save shows up
    as a conflict on the next save rather than being overwritten.
    """
    revisions = {name: store.revision(name) for name in (PRODUCTS, SLIDES, VIDEOS)}
    return {
        'revisions': revisions,
        'catalog': {
            'products': [product.to_dict() for product in query_service.list_products(store)],
            'slides': [slide.to_dict() for slide in query_service.list_slides(store)],
            'videos': [video.to_dict() for video in query_service.list_videos(store)],
            'categories': category_store.fetch(),
            'payment_methods': load_payment_methods(store),
            'subscription_plans': load_subscription_plans(store),
            'revisions': revisions,
        },
        'orders': [document.to_dict() for document in orders.list_orders(store)],
        'contracts': [document.to_dict() for document in contracts.list_contracts(store)],
        'subscriptions': [document.to_dict() for document in subscriptions.list_subscriptions(store)],
        'features': [document.to_dict() for document in features.list_features(store)],
    }


@staff_member_required
def admin_dashboard(request):
    tab = request.GET.get('tab') or TABS[0][0]
    context = {
        'tabs': TABS,
        'active_tab': tab,
        'statuses': orders.STATUSES,
        'editor': _editor_for(tab),
        'json_section': JSON_SECTIONS.get(tab),
    }
    try:
        context.update(_build_dashboard_context(get_document_store(), request.category_store))
    except DocumentStoreError as exc:
        logger.error("Back-office data failed to load: %s", exc)
        context['load_error'] = store_error_message(exc)
    return render(request, 'storefront/admin/dashboard.html', context)


def _set_status(request, setter, doc_id, tab, label):
    form = StatusForm(request.POST)
    if not form.is_valid():
        messages.error(request, "Statut invalide.")
        return _dashboard(tab)
    try:
        setter(get_document_store(), doc_id, form.cleaned_data['status'])
    except DocumentStoreError as exc:
        logger.error("%s %s status update failed: %s", label, doc_id, exc)
        messages.error(request, store_error_message(exc))
    else:
        logger.info("%s %s set to %s by %s", label, doc_id, form.cleaned_data['status'], request.user.pk)
        messages.success(request, "Statut mis à jour.")
    return _dashboard(tab)


def _delete(request, deleter, doc_id, tab, label):
    try:
        deleter(get_document_store(), doc_id)
    except DocumentStoreError as exc:
        logger.error("%s %s deletion failed: %s", label, doc_id, exc)
        messages.error(request, store_error_message(exc))
    else:
        logger.info("%s %s deleted by %s", label, doc_id, request.user.pk)
        messages.success(request, "Élément supprimé.")
    return _dashboard(tab)


@staff_member_required
@require_POST
def order_status(request, order_id):
    return _set_status(request, orders.set_order_status, order_id, 'orders', 'Order')


@staff_member_required
@require_POST
def order_delete(request, order_id):
    return _delete(request, orders.delete_order, order_id, 'orders', 'Order')


@staff_member_required
@require_POST
def contract_status(request, contract_id):
    return _set_status(request, contracts.set_contract_status, contract_id, 'contracts', 'Contract')


@staff_member_required
@require_POST
def contract_delete(request, contract_id):
    return _delete(request, contracts.delete_contract, contract_id, 'contracts', 'Contract')


@staff_member_required
@require_POST
def subscription_confirm(request, subscription_id):
    try:
        expiry = subscriptions.confirm_subscription(get_document_store(), subscription_id)
    except subscriptions.InvalidPlan:
        messages.error(request, "Formule d'abonnement inconnue.")
    except DocumentStoreError as exc:
        logger.error("Subscription %s confirmation failed: %s", subscription_id, exc)
        messages.error(request, store_error_message(exc))
    else:
        logger.info("Subscription %s confirmed by %s", subscription_id, request.user.pk)
        messages.success(request, f"Abonnement activé jusqu'au {expiry:%d/%m/%Y %H:%M}.")
    return _dashboard('subscriptions')


@staff_member_required
@require_POST
def subscription_delete(request, subscription_id):
    return _delete(request, subscriptions.delete_subscription, subscription_id, 'subscriptions', 'Subscription')


@staff_member_required
@require_POST
def feedback_reply(request, feature_id, feedback_id):
    form = ReplyForm(request.POST)
    if not form.is_valid():
        messages.error(request, "La réponse ne peut pas être vide.")
        return _dashboard('features')
    try:
        features.reply_to_feedback(get_document_store(), feature_id, feedback_id, form.cleaned_data['reply'])
    except DocumentStoreError as exc:
        logger.error("Reply to feedback %s failed: %s", feedback_id, exc)
        messages.error(request, store_error_message(exc))
    else:
        messages.success(request, "Réponse enregistrée.")
    return _dashboard('features')
