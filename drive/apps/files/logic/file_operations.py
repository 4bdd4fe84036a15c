"""Business logic for file operations.

Blob storage and the database are written in two phases. A new upload
writes the blob first and commits the record second; if the commit fails
the blob is removed again (see ``logic.saga``). Validation and ownership
failures are raised before storage is touched.
"""

import logging
import uuid
from collections.abc import Iterable
from typing import IO, Any, Final, TypedDict

from django.contrib.auth import get_user_model
from django.core.files.base import ContentFile
from django.db import DatabaseError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from drive.apps.files.exceptions import (
    InvalidIdentifierError,
    NotFoundError,
    StorageError,
    UploadFailedError,
)
from drive.apps.files.infrastructure.blobs import get_blob_store
from drive.apps.files.infrastructure.metadata import (
    calculate_checksum,
    detect_mime_type,
    get_file_size,
)
from drive.apps.files.logic.record_operations import (
    OwnerStats,
    create_record,
    delete_record,
    delete_records,
    get_owned_record,
    get_owner_stats,
    list_owner_records,
    update_record,
)
from drive.apps.files.logic.saga import Saga, SagaError
from drive.apps.files.logic.validation import (
    get_upload_rules,
    validate_size,
    validate_upload,
)
from drive.apps.files.models import FileRecord, build_stored_name

User = get_user_model()
logger = logging.getLogger(__name__)

STATUS_DELETED: Final = 'deleted'
STATUS_NOT_FOUND: Final = 'not_found'
STATUS_INVALID_ID: Final = 'invalid_id'


class BatchDeleteItem(TypedDict):
    """Outcome for one requested id."""

    id: str
    status: str


class BatchDeleteResult(TypedDict):
    """Outcome of a batch delete."""

    deletedCount: int  # noqa: N815
    results: list[BatchDeleteItem]


def _resolve_owner(owner_id: int) -> User:
    owner = User.objects.filter(pk=owner_id).first()
    if owner is None:
        raise NotFoundError('User not found.', code='User.NotFound')
    return owner


def upload_file(  # noqa: WPS210
    owner_id: int,
    original_name: str,
    content: IO[bytes],
    content_type: str | None = None,
    content_hash: str | None = None,
) -> FileRecord:
    """Store a new file and create its record.

    Transaction safety: the blob is written first, then the record is
    committed. If the commit fails the blob is deleted (best effort) and
    no record exists.

    Args:
        owner_id: Primary key of the owner.
        original_name: Filename as uploaded.
        content: Seekable binary stream.
        content_type: Content type declared by the client.
        content_hash: SHA256 already computed while receiving the body.

    Returns:
        Created FileRecord.

    Raises:
        FileValidationError: If the file is empty, too large or of a
            forbidden type.
        NotFoundError: If the owner does not exist.
        UploadFailedError: If the blob write or the commit failed.
    """
    size_bytes = get_file_size(content)
    validate_upload(original_name, size_bytes, get_upload_rules())
    owner = _resolve_owner(owner_id)

    if content_hash is None:
        logger.info('Calculating checksum for upload: %s', original_name)
        content_hash = calculate_checksum(content)

    record_id = uuid.uuid4()
    stored_name = build_stored_name(record_id, original_name)
    mime_type = detect_mime_type(original_name, content_type)
    blobs = get_blob_store()

    def commit_record() -> FileRecord:
        with transaction.atomic():
            return create_record(
                owner=owner,
                record_id=record_id,
                original_name=original_name,
                size_bytes=size_bytes,
                content_type=mime_type,
                content_hash=content_hash,
                created_at=timezone.now(),
            )

    saga = Saga(f'upload {record_id}')
    saga.add_step(
        'write blob',
        lambda: blobs.save(owner.pk, stored_name, content),
        compensation=lambda: blobs.rollback(owner.pk, stored_name),
    )
    saga.add_step('commit record', commit_record)
    try:
        results = saga.execute()
    except SagaError as exc:
        raise UploadFailedError() from exc

    record: FileRecord = results['commit record']
    logger.info(
        'File uploaded: %s as %s (%d bytes)',
        original_name,
        record.id,
        size_bytes,
    )
    return record


def replace_file_content(
    owner: User,
    file_id: Any,
    content: IO[bytes],
    content_hash: str | None = None,
) -> FileRecord:
    """Overwrite the content of an owned file.

    The blob keeps its name. Once the overwrite succeeded there is no
    previous content left to restore, so a failing commit afterwards
    leaves new bytes under old metadata.

    Args:
        owner: Requesting user.
        file_id: File id as received from the client.
        content: Seekable binary stream with the new content.
        content_hash: SHA256 of the new content, computed if omitted.

    Returns:
        Updated FileRecord.

    Raises:
        InvalidIdentifierError: If the id is malformed.
        NotFoundError: If the file is not owned or does not exist.
        FileValidationError: If the new content is too large.
        UploadFailedError: If the overwrite or the commit failed.
    """
    record = get_owned_record(file_id, owner)
    size_bytes = get_file_size(content)
    if size_bytes:
        validate_size(size_bytes, get_upload_rules())

    if content_hash is None:
        content_hash = calculate_checksum(content)

    try:
        get_blob_store().save(owner.pk, record.get_stored_name(), content)
    except StorageError as exc:
        raise UploadFailedError('Failed to update file content.') from exc

    try:
        with transaction.atomic():
            update_record(
                record,
                modified_at=timezone.now(),
                content_hash=content_hash,
                size_bytes=size_bytes,
            )
    except DatabaseError as exc:
        logger.exception(
            'Blob overwritten but record update failed: %s',
            record.id,
        )
        raise UploadFailedError('Failed to update file content.') from exc
    return record


def update_file_text(owner: User, file_id: Any, text: str) -> FileRecord:
    """Replace file content with UTF-8 encoded text.

    Args:
        owner: Requesting user.
        file_id: File id as received from the client.
        text: New textual content.

    Returns:
        Updated FileRecord.
    """
    content = ContentFile(text.encode('utf-8'), name='content')
    return replace_file_content(owner, file_id, content)


def open_file_content(owner: User, file_id: Any) -> tuple[FileRecord, IO[bytes]]:
    """Open an owned file for download.

    Args:
        owner: Requesting user.
        file_id: File id as received from the client.

    Returns:
        Record and a binary stream positioned at 0.

    Raises:
        InvalidIdentifierError: If the id is malformed.
        NotFoundError: If the file or its blob is missing.
    """
    record = get_owned_record(file_id, owner)
    stream = get_blob_store().open(owner.pk, record.get_stored_name())
    if stream is None:
        logger.warning('Record %s has no blob', record.id)
        raise NotFoundError()
    return record, stream


def list_files(owner: User) -> QuerySet[FileRecord]:
    """List owner's files, newest first."""
    return list_owner_records(owner)


def get_file(owner: User, file_id: Any) -> FileRecord:
    """Read one owned file record."""
    return get_owned_record(file_id, owner)


def delete_file(owner: User, file_id: Any) -> None:
    """Delete an owned file from storage and database.

    The blob goes first, best effort; the record is deleted even if the
    blob could not be removed.

    Args:
        owner: Requesting user.
        file_id: File id as received from the client.

    Raises:
        InvalidIdentifierError: If the id is malformed.
        NotFoundError: If the file is not owned or does not exist.
    """
    record = get_owned_record(file_id, owner)
    try:
        get_blob_store().delete(owner.pk, record.get_stored_name())
    except StorageError:
        logger.warning('Deleting record %s despite blob failure', record.id)

    with transaction.atomic():
        delete_record(record)


def delete_files(owner: User, file_ids: Iterable[Any]) -> BatchDeleteResult:
    """Delete several owned files.

    Ids that are malformed, unknown or owned by someone else are skipped
    and reported in ``results``.

    Args:
        owner: Requesting user.
        file_ids: File ids as received from the client.

    Returns:
        Number of deleted files and a status per requested id.

    Raises:
        NotFoundError: If none of the ids resolved to an owned file.
    """
    records: dict[uuid.UUID, FileRecord] = {}
    statuses: list[BatchDeleteItem] = []
    for raw_id in file_ids:
        try:
            record = get_owned_record(raw_id, owner)
        except InvalidIdentifierError:
            statuses.append({'id': str(raw_id), 'status': STATUS_INVALID_ID})
            continue
        except NotFoundError:
            statuses.append({'id': str(raw_id), 'status': STATUS_NOT_FOUND})
            continue
        records[record.id] = record
        statuses.append({'id': str(raw_id), 'status': STATUS_DELETED})

    if not records:
        raise NotFoundError()

    owned_records = list(records.values())
    get_blob_store().delete_many(
        owner.pk,
        [record.get_stored_name() for record in owned_records],
    )
    with transaction.atomic():
        deleted_count = delete_records(owned_records)

    return BatchDeleteResult(deletedCount=deleted_count, results=statuses)


def get_storage_stats(owner: User) -> OwnerStats:
    """Count owner's files and their total size."""
    return get_owner_stats(owner)


def serialize_record(record: FileRecord) -> dict[str, Any]:
    """Build the public JSON representation of a record.

    Args:
        record: File record (owner should be select_related).

    Returns:
        Dictionary with camelCase keys.
    """
    return {
        'id': str(record.id),
        'originalName': record.original_name,
        'size': record.size_bytes,
        'contentType': record.content_type,
        'createdAt': record.created_at.isoformat(),
        'modifiedAt': record.modified_at.isoformat(),
        'ownerUsername': record.owner.get_username(),
        'contentHash': record.content_hash,
    }
