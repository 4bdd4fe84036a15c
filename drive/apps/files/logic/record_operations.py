"""Metadata store: owner-scoped access to file records.

Mutating functions do not open transactions themselves. The caller wraps
them in ``transaction.atomic()`` and thereby decides when to commit.
"""

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import Any, TypedDict

from django.contrib.auth import get_user_model
from django.db.models import Count, QuerySet, Sum

from drive.apps.files.exceptions import InvalidIdentifierError, NotFoundError
from drive.apps.files.models import FileRecord

User = get_user_model()
logger = logging.getLogger(__name__)


class OwnerStats(TypedDict):
    """Aggregated usage of one owner."""

    totalFiles: int  # noqa: N815
    totalSizeBytes: int  # noqa: N815


def parse_record_id(raw_id: Any) -> uuid.UUID:
    """Parse a client supplied file id.

    Args:
        raw_id: Id as received (string or UUID).

    Returns:
        Parsed UUID.

    Raises:
        InvalidIdentifierError: If the value is not a UUID.
    """
    if isinstance(raw_id, uuid.UUID):
        return raw_id
    try:
        return uuid.UUID(str(raw_id))
    except (TypeError, ValueError, AttributeError) as exc:
        raise InvalidIdentifierError() from exc


def create_record(  # noqa: WPS211
    owner: User,
    record_id: uuid.UUID,
    original_name: str,
    size_bytes: int,
    content_type: str,
    content_hash: str,
    created_at: datetime,
) -> FileRecord:
    """Insert a new file record.

    ``created_at`` and ``modified_at`` both get ``created_at``.

    Args:
        owner: Owner of the file.
        record_id: Pre-generated id, also used for the blob name.
        original_name: Filename as uploaded.
        size_bytes: Content length.
        content_type: MIME type.
        content_hash: SHA256 hex digest.
        created_at: Creation instant.

    Returns:
        Created FileRecord.
    """
    record = FileRecord.objects.create(
        id=record_id,
        owner=owner,
        original_name=original_name,
        size_bytes=size_bytes,
        content_type=content_type,
        content_hash=content_hash,
        created_at=created_at,
        modified_at=created_at,
    )
    logger.info('File record created: %s (owner=%s)', record.id, owner.pk)
    return record


def get_record(record_id: Any) -> FileRecord | None:
    """Read a record by id regardless of owner.

    Args:
        record_id: File id.

    Returns:
        FileRecord or None if there is none.

    Raises:
        InvalidIdentifierError: If the id is malformed.
    """
    parsed_id = parse_record_id(record_id)
    return (
        FileRecord.objects
        .select_related('owner')
        .filter(id=parsed_id)
        .first()
    )


def list_owner_records(owner: User) -> QuerySet[FileRecord]:
    """List an owner's records, newest first.

    Args:
        owner: Owner of the files.

    Returns:
        QuerySet ordered by ``created_at`` descending.
    """
    return (
        FileRecord.objects
        .filter(owner=owner)
        .select_related('owner')
        .order_by('-created_at')
    )


def get_owned_record(record_id: Any, owner: User) -> FileRecord:
    """Read a record only if it belongs to ``owner``.

    A record of another owner is reported exactly like a missing one.

    Args:
        record_id: File id as received from the client.
        owner: Requesting user.

    Returns:
        FileRecord.

    Raises:
        InvalidIdentifierError: If the id is malformed.
        NotFoundError: If there is no such record for this owner.
    """
    parsed_id = parse_record_id(record_id)
    record = (
        FileRecord.objects
        .select_related('owner')
        .filter(id=parsed_id, owner=owner)
        .first()
    )
    if record is None:
        raise NotFoundError()
    return record


def update_record(record: FileRecord, **changes: Any) -> FileRecord:
    """Apply field changes and save only those fields.

    Args:
        record: Record to update.
        changes: Model field values.

    Returns:
        The updated record.
    """
    for field_name, field_value in changes.items():
        setattr(record, field_name, field_value)
    record.save(update_fields=list(changes))
    logger.info('File record updated: %s (%s)', record.id, ', '.join(changes))
    return record


def delete_record(record: FileRecord) -> None:
    """Delete one record."""
    record_id = record.id
    record.delete()
    logger.info('File record deleted: %s', record_id)


def delete_records(records: Sequence[FileRecord]) -> int:
    """Delete several records in one query.

    Args:
        records: Records to delete.

    Returns:
        Number of deleted rows.
    """
    record_ids = [record.id for record in records]
    deleted_count, _ = FileRecord.objects.filter(id__in=record_ids).delete()
    logger.info('File records deleted: %d', deleted_count)
    return deleted_count


def get_owner_stats(owner: User) -> OwnerStats:
    """Count an owner's files and sum their sizes in the database.

    Args:
        owner: Owner of the files.

    Returns:
        Stats with zero values for an owner without files.
    """
    aggregated = FileRecord.objects.filter(owner=owner).aggregate(
        total_files=Count('id'),
        total_size=Sum('size_bytes'),
    )
    return OwnerStats(
        totalFiles=aggregated['total_files'] or 0,
        totalSizeBytes=aggregated['total_size'] or 0,
    )
