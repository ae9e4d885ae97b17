"""
Celery application for background notifications and periodic sweeps.
"""
import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'artisan.settings')

app = Celery('artisan')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
