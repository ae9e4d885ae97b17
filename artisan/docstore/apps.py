from django.apps import AppConfig


class DocstoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'docstore'
    verbose_name = 'Document store'
