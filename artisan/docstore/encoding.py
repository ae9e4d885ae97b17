"""
JSON encoding for stored documents.

Timestamps survive the round trip: datetimes are written as
``{"__datetime__": "<iso>"}`` and turned back into aware datetimes on load.
"""
import json
from datetime import date, datetime, timezone as dt_timezone

from django.core.serializers.json import DjangoJSONEncoder
from django.utils import timezone

DATETIME_TAG = "__datetime__"


class DocumentJSONEncoder(DjangoJSONEncoder):

    def encode(self, o):
        return super().encode(_tag_datetimes(o))

    def iterencode(self, o, _one_shot=False):
        return super().iterencode(_tag_datetimes(o), _one_shot)


class DocumentJSONDecoder(json.JSONDecoder):

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("object_hook", _untag_datetime)
        super().__init__(*args, **kwargs)


def _tag_datetimes(value):
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            value = timezone.make_aware(value, dt_timezone.utc)
        return {DATETIME_TAG: value.isoformat()}
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: _tag_datetimes(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_tag_datetimes(item) for item in value]
    return value


def _untag_datetime(obj):
    if len(obj) == 1 and DATETIME_TAG in obj:
        return datetime.fromisoformat(obj[DATETIME_TAG])
    return obj


def normalize(data):
    """
    Returns `data` exactly as it would read back after being stored.
    """
    return json.loads(json.dumps(data, cls=DocumentJSONEncoder), cls=DocumentJSONDecoder)
