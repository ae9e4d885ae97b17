import docstore.encoding
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='CollectionRevision',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('collection', models.CharField(max_length=100, unique=True)),
                ('revision', models.PositiveBigIntegerField(default=0)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name='StoredDocument',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('collection', models.CharField(db_index=True, max_length=100)),
                ('doc_id', models.CharField(max_length=100)),
                ('data', models.JSONField(decoder=docstore.encoding.DocumentJSONDecoder, default=dict, encoder=docstore.encoding.DocumentJSONEncoder)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['collection', 'id'],
            },
        ),
        migrations.AddConstraint(
            model_name='storeddocument',
            constraint=models.UniqueConstraint(fields=('collection', 'doc_id'), name='docstore_unique_document'),
        ),
    ]
