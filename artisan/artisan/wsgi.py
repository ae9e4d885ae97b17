"""
WSGI config for the Artisan storefront.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'artisan.settings')

application = get_wsgi_application()
