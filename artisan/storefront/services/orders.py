"""
Orders placed through the manual-payment checkout.
"""
import logging

from django.conf import settings

from docstore.backends.base import SERVER_TIMESTAMP

from .catalog.items import InternetListing, ShopProduct

logger = logging.getLogger(__name__)

ORDERS = 'orders'

STATUS_PENDING = 'pending'
STATUS_COMPLETED = 'completed'
STATUS_FAILED = 'failed'
STATUSES = (STATUS_PENDING, STATUS_COMPLETED, STATUS_FAILED)


class InvalidStatus(ValueError):
    pass


def subtotal(products):
    return sum(int(product.price or 0) for product in products)


def delivery_fee_for(products):
    """
    Flat delivery fee as soon as one physical shop product is ordered.
    """
    if any(isinstance(product, ShopProduct) for product in products):
        return settings.DELIVERY_FEE
    return 0


def order_line(product, options=None):
    line = {'id': product.id, 'title': product.title, 'price': product.price}
    if isinstance(product, ShopProduct) and product.collection:
        line['collection'] = product.collection
    if isinstance(product, InternetListing) and product.internet_class:
        line['internet_class'] = product.internet_class
    options = options or {}
    if options.get('color'):
        line['selected_color'] = options['color']
    if options.get('size'):
        line['selected_size'] = options['size']
    return line


def create_order(store, user, customer, products, options=None):
    """
    Stores a pending order for the given products.

    `customer` holds name, email, phone, transaction_id and optional notes.
    Returns the order ID and its total (delivery included).
    """
    options = options or {}
    total = subtotal(products) + delivery_fee_for(products)
    data = {
        'customer_name': customer['name'],
        'customer_email': customer['email'],
        'customer_phone': customer['phone'],
        'transaction_id': customer['transaction_id'],
        'items': [order_line(product, options.get(product.id)) for product in products],
        'total_amount': total,
        'user_id': str(user.pk),
        'created_at': SERVER_TIMESTAMP,
        'status': STATUS_PENDING,
    }
    if customer.get('notes'):
        data['customer_notes'] = customer['notes']
    order_id = store.add(ORDERS, data)
    logger.info("Order %s created for user %s, total %s FCFA", order_id, user.pk, total)
    return order_id, total


def list_orders(store):
    return store.list(ORDERS, order_by='created_at', descending=True)


def set_order_status(store, order_id, status):
    if status not in STATUSES:
        raise InvalidStatus(status)
    store.update(ORDERS, order_id, {'status': status})


def delete_order(store, order_id):
    store.delete(ORDERS, order_id)
