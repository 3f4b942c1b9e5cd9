"""Locally stored CSV uploads.

An upload keeps the raw text of a CSV file so that an import can be previewed
now and committed later (for example by the chat assistant) without attaching
the file again.
"""

import json
import uuid
from dataclasses import dataclass
from datetime import datetime, UTC

from envelopes.domain.errors import (
    DomainError,
    NotFoundError,
    ValidationError,
    upload_corrupted,
    upload_not_found,
    upload_too_large,
)
from envelopes.store.base import StateStorage

UPLOAD_KEY_PREFIX = "envelopes:csv-upload:"
MAX_UPLOAD_CHARS = 4_500_000


@dataclass(frozen=True)
class CsvUpload:
    """Stored CSV upload."""

    key: str
    filename: str
    text: str
    created_at: str
    size_chars: int


@dataclass(frozen=True)
class CsvUploadInfo:
    """Upload metadata without the text."""

    key: str
    filename: str
    created_at: str
    size_chars: int


class CsvUploadService:
    """Service for saving and loading CSV uploads."""

    def __init__(self, storage: StateStorage):
        """Initialize upload service.

        Args:
            storage: Key-value storage shared with the budget state
        """
        self.storage = storage

    def save_upload(self, filename: str, text: str) -> CsvUploadInfo:
        """Store a CSV text.

        Raises:
            ValidationError: If the text is longer than MAX_UPLOAD_CHARS
        """
        if len(text) > MAX_UPLOAD_CHARS:
            raise ValidationError(upload_too_large(len(text)))

        key = f"{UPLOAD_KEY_PREFIX}{uuid.uuid4()}"
        created_at = datetime.now(UTC).isoformat()
        payload = {
            "key": key,
            "filename": filename,
            "text": text,
            "created_at": created_at,
            "size_chars": len(text),
        }
        self.storage.set_item(key, json.dumps(payload))
        return CsvUploadInfo(
            key=key, filename=filename, created_at=created_at, size_chars=len(text)
        )

    def get_upload(self, key: str) -> CsvUpload:
        """Load a stored CSV upload.

        Raises:
            NotFoundError: If no upload is stored under key
            ValidationError: If the stored record is corrupted
        """
        raw = self.storage.get_item(key)
        if not raw:
            raise NotFoundError(upload_not_found())
        try:
            payload = json.loads(raw)
        except ValueError:
            raise ValidationError(upload_corrupted())
        if (
            not isinstance(payload, dict)
            or not payload.get("text")
            or not payload.get("filename")
        ):
            raise ValidationError(upload_corrupted())

        text = payload["text"]
        return CsvUpload(
            key=key,
            filename=payload["filename"],
            text=text,
            created_at=payload.get("created_at", ""),
            size_chars=payload.get("size_chars", len(text)),
        )

    def delete_upload(self, key: str) -> None:
        """Delete a stored upload. Deleting a missing upload is a no-op."""
        self.storage.remove_item(key)

    def list_uploads(self) -> list[CsvUploadInfo]:
        """List stored uploads, skipping unreadable records."""
        uploads = []
        for key in self.storage.list_keys(UPLOAD_KEY_PREFIX):
            try:
                upload = self.get_upload(key)
            except DomainError:
                continue
            uploads.append(
                CsvUploadInfo(
                    key=upload.key,
                    filename=upload.filename,
                    created_at=upload.created_at,
                    size_chars=upload.size_chars,
                )
            )
        return uploads
