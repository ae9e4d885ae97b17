"""
Manual-payment checkout: the customer pays by mobile money and submits the
transaction ID, staff confirm the order later.
"""

import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect, render

from docstore.exceptions import DocumentStoreError
from docstore.registry import get_document_store

from ..forms import CheckoutForm
from ..services.orders import create_order, delivery_fee_for, subtotal
from ..services.site_config import load_payment_methods
from ..tasks import queue_notification
from .cart import resolve_cart
from .utils import clear_session_cart, get_cart_options, store_error_message

logger = logging.getLogger(__name__)


@login_required
def checkout(request):
    store = get_document_store()
    try:
        products = resolve_cart(request, store)
        payment_methods = load_payment_methods(store)
    except DocumentStoreError as exc:
        logger.error("Checkout data failed to load: %s", exc)
        messages.error(request, store_error_message(exc))
        return redirect('cart')

    if not products:
        return redirect('discover')

    fee = delivery_fee_for(products)
    total = subtotal(products) + fee

    if request.method == 'POST':
        form = CheckoutForm(request.POST)
        if form.is_valid():
            try:
                order_id, _ = create_order(
                    store, request.user, form.customer(), products, get_cart_options(request),
                )
            except DocumentStoreError as exc:
                logger.error("Order creation failed for user %s: %s", request.user.pk, exc)
                messages.error(request, store_error_message(exc))
            else:
                clear_session_cart(request)
                queue_notification('new_order', order_id)
                return redirect('order_success', order_id=order_id)
    else:
        form = CheckoutForm(initial={
            'name': request.user.get_full_name(),
            'email': request.user.email,
        })

    return render(request, 'storefront/checkout.html', {
        'form': form,
        'products': products,
        'payment_methods': payment_methods,
        'delivery_fee': fee,
        'total': total,
    })


@login_required
def order_success(request, order_id):
    return render(request, 'storefront/order_success.html', {'order_id': order_id})
