"""Database models for files app."""

import uuid
from pathlib import Path
from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models
from django.utils import timezone

# Constants for field max lengths
_NAME_MAX_LENGTH: Final = 255
_CONTENT_TYPE_MAX_LENGTH: Final = 255
_CONTENT_HASH_MAX_LENGTH: Final = 64  # SHA256 hex length

DEFAULT_CONTENT_TYPE: Final = 'application/octet-stream'


@final
class FileRecord(models.Model):
    """Metadata of one stored file.

    The bytes live in the blob store under
    ``{owner_id}/{id}{extension of original_name}``; this row is the only
    place that knows the original name, size and content hash.

    ``created_at`` and ``modified_at`` are set to the same instant on
    creation; only a content replace moves ``modified_at``.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    # Owner relationship
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='file_records',
        db_index=True,
    )

    original_name = models.CharField(
        max_length=_NAME_MAX_LENGTH,
        help_text='Filename as uploaded, used for display and extension',
    )

    size_bytes = models.BigIntegerField(
        help_text='Blob length in bytes',
    )

    content_type = models.CharField(
        max_length=_CONTENT_TYPE_MAX_LENGTH,
        default=DEFAULT_CONTENT_TYPE,
    )

    content_hash = models.CharField(
        max_length=_CONTENT_HASH_MAX_LENGTH,
        help_text='SHA256 hex digest of the current content',
        db_index=True,
    )

    # Timestamps
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    modified_at = models.DateTimeField(default=timezone.now)

    class Meta:
        """Model metadata."""

        verbose_name = 'File record'  # type: ignore[mutable-override]
        verbose_name_plural = 'File records'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-created_at']

        indexes: ClassVar[list[models.Index]] = [
            # Optimize per-owner listing, newest first
            models.Index(
                fields=['owner', '-created_at'],
                name='files_owner_recent_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.owner_id}:{self.original_name}'

    def get_stored_name(self) -> str:
        """Build the blob name inside the owner's namespace.

        Example: id '3f2a...' with 'Report.PDF' -> '3f2a....PDF'

        Returns:
            Blob name, keeping the extension case of the original name.
        """
        return build_stored_name(self.id, self.original_name)

    def get_extension(self) -> str:
        """Extract file extension.

        Example: 'file.PDF' -> 'pdf'

        Returns:
            Extension without dot (lowercase).
        """
        extension = Path(self.original_name).suffix
        return extension.lstrip('.').lower()


def build_stored_name(record_id: uuid.UUID, original_name: str) -> str:
    """Build ``{id}{extension}`` blob name for a record.

    Args:
        record_id: File record id.
        original_name: Name the file was uploaded with.

    Returns:
        Blob name inside the owner's namespace.
    """
    return f'{record_id}{Path(original_name).suffix}'
