"""
Back-office uploads (images and videos) kept in the default file storage.
"""
from __future__ import annotations

import logging
import re
import time

from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)

UPLOAD_DIR = 'uploads'


def upload_name(original_name: str, now_ms: int | None = None) -> str:
    """
    `uploads/<epoch ms>-<name>` with whitespace runs replaced by underscores.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    safe_name = re.sub(r'\s+', '_', original_name or 'file')
    return f"{UPLOAD_DIR}/{now_ms}-{safe_name}"


def save_upload(uploaded_file, storage=None) -> str:
    """
    Stores the file and returns its public URL.
    """
    storage = storage or default_storage
    stored_name = storage.save(upload_name(uploaded_file.name), uploaded_file)
    logger.info("Stored upload %s (%s bytes)", stored_name, getattr(uploaded_file, 'size', '?'))
    return storage.url(stored_name)
