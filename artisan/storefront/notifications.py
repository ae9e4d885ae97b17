"""
Telegram notifications for staff: new orders, subscription requests and
partner contracts.
"""
import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"


class TelegramNotifier:
    """Sends HTML messages to the staff chat."""

    def __init__(self, bot_token=None, chat_id=None, admin_id=None):
        self.bot_token = bot_token if bot_token is not None else settings.TELEGRAM_BOT_TOKEN
        self.chat_id = chat_id if chat_id is not None else settings.TELEGRAM_CHAT_ID
        self.admin_id = admin_id if admin_id is not None else settings.TELEGRAM_ADMIN_ID

    def is_configured(self):
        return bool(self.bot_token and (self.chat_id or self.admin_id))

    def send_message(self, message, parse_mode='HTML'):
        """
        Posts the message; returns False when the bot is not configured.

        HTTP failures raise `requests.RequestException` so the Celery task can
        retry.
        """
        if not self.is_configured():
            logger.debug("Telegram not configured, message dropped")
            return False
        target_id = self.admin_id or self.chat_id
        response = requests.post(
            TELEGRAM_API_URL.format(token=self.bot_token),
            data={'chat_id': target_id, 'text': message, 'parse_mode': parse_mode},
            timeout=10,
        )
        response.raise_for_status()
        return True

    @staticmethod
    def format_amount(amount):
        return f"{int(amount or 0):,}".replace(',', ' ') + " FCFA"

    def format_new_order(self, order_id, order):
        lines = [
            "🛒 <b>Nouvelle commande</b>",
            f"ID : <code>{order_id}</code>",
            f"Client : {order.get('customer_name', '')} ({order.get('customer_phone', '')})",
            f"Email : {order.get('customer_email', '')}",
            f"Transaction : <code>{order.get('transaction_id', '')}</code>",
            "",
        ]
        for item in order.get('items') or []:
            details = [item.get('selected_color'), item.get('selected_size')]
            suffix = f" ({', '.join(d for d in details if d)})" if any(details) else ''
            lines.append(f"• {item.get('title', '')}{suffix} : {self.format_amount(item.get('price'))}")
        lines.append("")
        lines.append(f"<b>Total : {self.format_amount(order.get('total_amount'))}</b>")
        if order.get('customer_notes'):
            lines.append(f"Note : {order['customer_notes']}")
        return "\n".join(lines)

    def format_subscription_request(self, subscription_id, subscription):
        return "\n".join([
            "📺 <b>Demande d'abonnement</b>",
            f"ID : <code>{subscription_id}</code>",
            f"Utilisateur : {subscription.get('user_email', '')}",
            f"Formule : {subscription.get('plan', '')}",
            f"Montant : {self.format_amount(subscription.get('amount'))}",
            f"Transaction : <code>{subscription.get('transaction_id', '')}</code>",
        ])

    def format_contract(self, contract_id, contract):
        return "\n".join([
            "🤝 <b>Demande de partenariat</b>",
            f"ID : <code>{contract_id}</code>",
            f"{contract.get('firstname', '')} {contract.get('name', '')}",
            f"{contract.get('email', '')} / {contract.get('phone', '')}",
            f"Motif : {contract.get('reason', '')}",
        ])
