"""
core.media — Uploaded media persistence.

Media files (report recordings, profile photos) are written through
Django's storage API so that the backend can be swapped in settings
(``STORAGES["default"]``) without touching service code.  The stored
object's public URL is what gets persisted on the model.
"""

from __future__ import annotations

import logging
import os
import uuid
from typing import NamedTuple

from django.core.files.storage import default_storage
from django.core.files.uploadedfile import UploadedFile
from django.utils import timezone

from core.domain.exceptions import StorageError

logger = logging.getLogger(__name__)


class StoredMedia(NamedTuple):
    """Storage name (for later removal) and public URL of a saved upload."""

    name: str
    url: str


class MediaStorageService:
    """Store uploads under dated folders and return their public URL."""

    @staticmethod
    def build_name(folder: str, original_name: str) -> str:
        """
        Return a collision-free storage path such as
        ``reports/2026/10/19/3f2a…c1.mp3``.
        """
        _, ext = os.path.splitext(original_name or "")
        today = timezone.localdate()
        return (
            f"{folder}/{today:%Y/%m/%d}/"
            f"{uuid.uuid4().hex}{ext.lower()}"
        )

    @staticmethod
    def store(upload: UploadedFile, folder: str) -> StoredMedia:
        """
        Persist ``upload`` and return its storage name and the URL clients
        should use to fetch it.

        Raises:
            StorageError: The storage backend refused the write.
        """
        name = MediaStorageService.build_name(folder, upload.name)
        try:
            saved_name = default_storage.save(name, upload)
            url = default_storage.url(saved_name)
        except OSError as exc:
            logger.error("Failed to store upload %s: %s", upload.name, exc)
            raise StorageError("Failed to store the uploaded media.") from exc
        logger.info("Stored upload %s as %s", upload.name, saved_name)
        return StoredMedia(saved_name, url)

    @staticmethod
    def discard(name: str) -> None:
        """
        Remove a stored upload whose database row was never written.

        Called while another error is propagating, so a failed delete is
        logged rather than raised.
        """
        try:
            default_storage.delete(name)
        except OSError as exc:
            logger.error("Failed to remove orphaned upload %s: %s", name, exc)
            return
        logger.info("Removed orphaned upload %s", name)
