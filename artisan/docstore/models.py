from django.db import models

from .encoding import DocumentJSONDecoder, DocumentJSONEncoder


class StoredDocument(models.Model):
    """
    One document of the ORM-backed store.
    """
    collection = models.CharField(max_length=100, db_index=True)
    doc_id = models.CharField(max_length=100)
    data = models.JSONField(default=dict, encoder=DocumentJSONEncoder, decoder=DocumentJSONDecoder)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['collection', 'doc_id'], name='docstore_unique_document'),
        ]
        ordering = ['collection', 'id']

    def __str__(self):
        return f"{self.collection}/{self.doc_id}"


class CollectionRevision(models.Model):
    """
    Counter bumped on every committed change to a collection.
    """
    collection = models.CharField(max_length=100, unique=True)
    revision = models.PositiveBigIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.collection}@{self.revision}"
