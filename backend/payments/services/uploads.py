from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4

from django.conf import settings
from django.core.files.storage import Storage, default_storage

from core.errors import InternalError
from core.messages import ErrorMessage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFile:
    filename: str


class UploadStore(Protocol):
    def upload_file(self, file) -> StoredFile:
        ...

    def get_file_url(self, filename: str) -> str:
        ...

    def delete_file(self, filename: str) -> None:
        ...


class StorageUploadStore:
    """
    Keep proof-of-payment images in a Django storage backend.

    Local development writes under MEDIA_ROOT; with USE_S3_MEDIA the default
    storage is S3 and ``get_file_url`` returns a signed link. Backend failures
    of any type (botocore errors included) surface as ``InternalError``.
    """

    def __init__(self, storage: Storage | None = None, prefix: str | None = None):
        self.storage = storage or default_storage
        self.prefix = prefix if prefix is not None else settings.PAYMENT_IMAGE_PREFIX

    def _build_name(self, original_name: str | None) -> str:
        _, ext = os.path.splitext(original_name or "")
        return f"{self.prefix}{uuid4().hex}{ext.lower()}"

    def upload_file(self, file) -> StoredFile:
        name = self._build_name(getattr(file, "name", None))
        try:
            stored_name = self.storage.save(name, file)
        except Exception as exc:
            logger.exception("Failed to store upload %s: %s", name, exc)
            raise InternalError(ErrorMessage.STORE_FILE_FAILED, detail=str(exc)) from exc
        return StoredFile(filename=stored_name)

    def get_file_url(self, filename: str) -> str:
        try:
            return self.storage.url(filename)
        except Exception as exc:
            logger.exception("Failed to resolve URL for %s: %s", filename, exc)
            raise InternalError(ErrorMessage.RESOLVE_FILE_URL_FAILED, detail=str(exc)) from exc

    def delete_file(self, filename: str) -> None:
        try:
            self.storage.delete(filename)
        except Exception as exc:
            logger.exception("Failed to delete stored file %s: %s", filename, exc)
            raise InternalError(ErrorMessage.DELETE_FILE_FAILED, detail=str(exc)) from exc
