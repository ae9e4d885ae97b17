"""
Cart views: the cart lives in the session as an ordered list of product IDs.
"""

import logging

from django.contrib import messages
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.views.decorators.cache import never_cache
from django.views.decorators.http import require_POST

from docstore.exceptions import DocumentStoreError
from docstore.registry import get_document_store

from ..services.catalog import query_service
from ..services.orders import delivery_fee_for, subtotal
from .utils import (
    add_to_session_cart,
    clear_session_cart,
    get_cart_from_session,
    get_cart_options,
    remove_from_session_cart,
    save_cart_to_session,
)

cart_logger = logging.getLogger('storefront.cart')


def _wants_json(request):
    return request.headers.get('x-requested-with') == 'XMLHttpRequest'


def resolve_cart(request, store=None):
    """
    Products currently in the cart, with prices read from the store.

    IDs that no longer exist are dropped from the session.
    """
    cart = get_cart_from_session(request)
    if not cart:
        return []
    found = query_service.get_products(store or get_document_store(), cart)
    products = [found[product_id] for product_id in cart if product_id in found]
    if len(products) != len(cart):
        cart_logger.info("Dropping %d stale cart entries", len(cart) - len(products))
        save_cart_to_session(request, [product.id for product in products])
    return products


@never_cache
def view_cart(request):
    products = []
    try:
        products = resolve_cart(request)
    except DocumentStoreError as exc:
        cart_logger.error("Cart products failed to load: %s", exc)
        messages.error(request, "Impossible de charger le panier pour le moment.")
    options = get_cart_options(request)
    fee = delivery_fee_for(products)
    total = subtotal(products)
    return render(request, 'storefront/cart.html', {
        'products': products,
        'lines': [{'product': product, 'options': options.get(product.id, {})} for product in products],
        'subtotal': total,
        'delivery_fee': fee,
        'total': total + fee,
    })


@require_POST
def add_to_cart(request, product_id):
    try:
        product = query_service.get_product(get_document_store(), product_id)
    except DocumentStoreError as exc:
        cart_logger.error("add_to_cart lookup failed for %s: %s", product_id, exc)
        product = None
    if product is None:
        if _wants_json(request):
            return JsonResponse({'success': False, 'error': 'Produit introuvable'}, status=404)
        messages.error(request, "Produit introuvable.")
        return redirect('discover')

    added = add_to_session_cart(
        request, product.id,
        color=request.POST.get('color', '').strip(),
        size=request.POST.get('size', '').strip(),
    )
    cart_logger.info("add_to_cart: product=%s added=%s", product.id, added)
    if _wants_json(request):
        return JsonResponse({'success': True, 'added': added, 'count': len(get_cart_from_session(request))})
    if added:
        messages.success(request, f"« {product.title} » a été ajouté au panier.")
    else:
        messages.info(request, f"« {product.title} » est déjà dans votre panier.")
    return redirect('cart')


@require_POST
def remove_from_cart(request, product_id):
    removed = remove_from_session_cart(request, product_id)
    if _wants_json(request):
        return JsonResponse({'success': removed, 'count': len(get_cart_from_session(request))})
    return redirect('cart')


@require_POST
def clear_cart(request):
    clear_session_cart(request)
    if _wants_json(request):
        return JsonResponse({'success': True, 'count': 0})
    return redirect('cart')
