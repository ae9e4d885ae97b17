import logging

import requests
from celery import shared_task

from docstore.registry import get_document_store

from .notifications import TelegramNotifier
from .services import subscriptions
from .services.contracts import CONTRACTS
from .services.orders import ORDERS

logger = logging.getLogger(__name__)

NOTIFICATION_SOURCES = {
    'new_order': (ORDERS, 'format_new_order'),
    'subscription_request': (subscriptions.SUBSCRIPTIONS, 'format_subscription_request'),
    'new_contract': (CONTRACTS, 'format_contract'),
}


@shared_task(bind=True, autoretry_for=(requests.RequestException,), retry_backoff=True,
             retry_kwargs={"max_retries": 3})
def send_telegram_notification_task(self, notification_type, document_id):
    """
    Celery task sending a staff notification about a stored document.
    notification_type: 'new_order', 'subscription_request', 'new_contract'
    """
    if notification_type not in NOTIFICATION_SOURCES:
        logger.warning("Unknown notification type %s", notification_type)
        return False
    collection, formatter = NOTIFICATION_SOURCES[notification_type]
    document = get_document_store().get(collection, document_id)
    if document is None:
        logger.warning("%s %s not found for Telegram notification", collection, document_id)
        return False

    notifier = TelegramNotifier()
    message = getattr(notifier, formatter)(document_id, document.data)
    sent = notifier.send_message(message)
    if sent:
        logger.info("Telegram notification '%s' sent for %s", notification_type, document_id)
    return sent


@shared_task
def expire_subscriptions_task():
    """
    Periodic sweep marking lapsed subscriptions as expired.
    """
    expired = subscriptions.expire_subscriptions(get_document_store())
    logger.info("Subscription expiry sweep: %d expired", expired)
    return expired


def queue_notification(notification_type, document_id):
    """
    Queues a Telegram notification; a broker outage never fails the request.
    """
    try:
        send_telegram_notification_task.delay(notification_type, document_id)
    except Exception as exc:
        logger.error("Could not queue %s notification for %s: %s",
                     notification_type, document_id, exc, exc_info=True)
