"""
Catalog pages: home, discover, detail pages and the about page.
"""

import logging

from django.contrib import messages
from django.http import Http404, JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_POST

from docstore.exceptions import DocumentNotFound, DocumentStoreError
from docstore.registry import get_document_store

from ..forms import ContractForm
from ..services.catalog import engagement_service, query_service
from ..services.catalog.items import Article, InternetListing, ShopProduct
from ..services.site_config import load_about
from .utils import store_error_message

logger = logging.getLogger(__name__)


def home(request):
    """
    Slides carousel and articles, filtered with ?category=.
    """
    category = request.GET.get('category') or query_service.ALL
    context = {'slides': [], 'articles': [], 'active_category': category}
    try:
        context.update(query_service.home_listing(get_document_store(), category))
    except DocumentStoreError as exc:
        logger.error("Home listing failed: %s", exc)
        context['load_error'] = store_error_message(exc)
    return render(request, 'storefront/home.html', context)


def discover(request):
    section = request.GET.get('section') or query_service.DEFAULT_SECTION
    category = request.GET.get('category') or query_service.ALL
    items = []
    load_error = None
    try:
        section, items = query_service.discover_listing(get_document_store(), section, category)
    except DocumentStoreError as exc:
        logger.error("Discover listing failed: %s", exc)
        load_error = store_error_message(exc)
        if section not in query_service.DISCOVER_SECTIONS:
            section = query_service.DEFAULT_SECTION

    filter_groups = {'shop': 'product_collections', 'internet': 'internet_classes', 'tv': 'tv_channels'}
    return render(request, 'storefront/discover.html', {
        'section': section,
        'active_category': category,
        'items': items,
        'filters': request.category_store.fetch().get(filter_groups[section], []),
        'load_error': load_error,
    })


def _product_or_404(product_id, kind):
    try:
        product = query_service.get_product(get_document_store(), product_id, kind)
    except DocumentStoreError as exc:
        logger.error("Product %s lookup failed: %s", product_id, exc)
        raise Http404("Produit indisponible") from exc
    if product is None:
        raise Http404("Produit introuvable")
    return product


def article_detail(request, product_id):
    article = _product_or_404(product_id, Article.kind)
    return render(request, 'storefront/product_detail.html', {
        'product': article,
        'category_label': request.category_store.label_for('article_categories', article.article_category),
    })


def product_detail(request, product_id):
    product = _product_or_404(product_id, ShopProduct.kind)
    return render(request, 'storefront/product_detail.html', {
        'product': product,
        'category_label': request.category_store.label_for('product_collections', product.collection),
        'can_add_to_cart': True,
    })


def listing_contact(request, product_id):
    """
    Internet listing page with the partner form and the outbound link.
    """
    listing = _product_or_404(product_id, InternetListing.kind)
    return render(request, 'storefront/contact.html', {
        'listing': listing,
        'form': ContractForm(),
        'category_label': request.category_store.label_for('internet_classes', listing.internet_class),
    })


@require_POST
def product_like(request, product_id):
    try:
        engagement_service.like_product(get_document_store(), product_id)
    except DocumentNotFound:
        raise Http404("Produit introuvable")
    except DocumentStoreError as exc:
        logger.error("Like on product %s failed: %s", product_id, exc)
        if request.headers.get('x-requested-with') == 'XMLHttpRequest':
            return JsonResponse({'error': store_error_message(exc)}, status=503)
        messages.error(request, store_error_message(exc))
    if request.headers.get('x-requested-with') == 'XMLHttpRequest':
        return JsonResponse({'success': True})
    return redirect(request.META.get('HTTP_REFERER') or 'discover')


def about(request):
    try:
        content = load_about(get_document_store())
    except DocumentStoreError as exc:
        logger.error("About content failed to load: %s", exc)
        content = None
    return render(request, 'storefront/about.html', {'content': content})
