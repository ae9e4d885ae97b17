"""
Marks active subscriptions whose expiry date has passed as expired.
"""
from django.core.management.base import BaseCommand, CommandError

from docstore.exceptions import DocumentStoreError
from docstore.registry import get_document_store
from storefront.services.subscriptions import expire_subscriptions


class Command(BaseCommand):
    help = 'Marks lapsed TV subscriptions as expired'

    def handle(self, *args, **options):
        try:
            expired = expire_subscriptions(get_document_store())
        except DocumentStoreError as exc:
            raise CommandError(f"Document store error: {exc}") from exc

        if expired == 0:
            self.stdout.write("No subscriptions to expire")
            return
        self.stdout.write(self.style.SUCCESS(f"Expired {expired} subscriptions"))
