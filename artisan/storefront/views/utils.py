"""
Helpers shared by the storefront view modules.
"""

import logging

from docstore.exceptions import (
    DocumentNotFound,
    PermissionDeniedError,
    RevisionConflict,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

CART_SESSION_KEY = 'cart'
CART_OPTIONS_SESSION_KEY = 'cart_options'


def get_cart_from_session(request):
    """
    Ordered list of product IDs in the cart.
    """
    cart = request.session.get(CART_SESSION_KEY, [])
    return [item for item in cart if isinstance(item, str)] if isinstance(cart, list) else []


def save_cart_to_session(request, cart):
    request.session[CART_SESSION_KEY] = list(cart)
    request.session.modified = True


def get_cart_options(request):
    """
    Colour/size chosen per product ID.
    """
    options = request.session.get(CART_OPTIONS_SESSION_KEY, {})
    return options if isinstance(options, dict) else {}


def save_cart_options(request, options):
    request.session[CART_OPTIONS_SESSION_KEY] = options
    request.session.modified = True


def add_to_session_cart(request, product_id, color='', size=''):
    """
    Adds a product once; returns False when it was already in the cart.
    """
    cart = get_cart_from_session(request)
    if product_id in cart:
        return False
    cart.append(product_id)
    save_cart_to_session(request, cart)
    if color or size:
        options = get_cart_options(request)
        options[product_id] = {'color': color, 'size': size}
        save_cart_options(request, options)
    return True


def remove_from_session_cart(request, product_id):
    cart = get_cart_from_session(request)
    if product_id not in cart:
        return False
    cart.remove(product_id)
    save_cart_to_session(request, cart)
    options = get_cart_options(request)
    if options.pop(product_id, None) is not None:
        save_cart_options(request, options)
    return True


def clear_session_cart(request):
    save_cart_to_session(request, [])
    save_cart_options(request, {})


def store_error_message(exc):
    """
    User-facing message for a document store failure.
    """
    if isinstance(exc, PermissionDeniedError):
        return "Permission refusée : vous n'avez pas les droits nécessaires pour cette opération."
    if isinstance(exc, RevisionConflict):
        return ("Les données ont été modifiées par un autre administrateur depuis le chargement "
                "de la page. Rechargez la page puis recommencez.")
    if isinstance(exc, DocumentNotFound):
        return "Élément introuvable."
    if isinstance(exc, StoreUnavailable):
        return "Service momentanément indisponible. Veuillez réessayer."
    return "Une erreur est survenue. Veuillez réessayer."
