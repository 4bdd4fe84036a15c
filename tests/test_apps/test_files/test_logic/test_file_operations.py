"""Tests for file operations business logic."""

import uuid
from io import BytesIO

import pytest
from django.core.files.base import ContentFile
from django.db import DatabaseError

from drive.apps.files.exceptions import (
    FileValidationError,
    InvalidIdentifierError,
    NotFoundError,
    StorageError,
    UploadFailedError,
)
from drive.apps.files.infrastructure.blobs import BlobStore
from drive.apps.files.infrastructure.metadata import calculate_bytes_checksum
from drive.apps.files.logic import file_operations
from drive.apps.files.logic.file_operations import (
    STATUS_DELETED,
    STATUS_INVALID_ID,
    STATUS_NOT_FOUND,
    delete_file,
    delete_files,
    get_storage_stats,
    list_files,
    open_file_content,
    replace_file_content,
    serialize_record,
    update_file_text,
    upload_file,
)
from drive.apps.files.models import FileRecord


@pytest.fixture
def uploaded(user, sample_file_content):
    """Upload the sample file for the test user.

    Returns:
        Created FileRecord.
    """
    return upload_file(user.pk, 'test.txt', sample_file_content)


@pytest.mark.django_db
def test_upload_file_success(uploaded, user, blob_store):
    """Upload creates a record and a blob named after the record id."""
    assert uploaded.owner == user
    assert uploaded.size_bytes == len(b'test file content')
    assert uploaded.content_type == 'text/plain'
    assert uploaded.content_hash == calculate_bytes_checksum(b'test file content')
    assert blob_store.exists(user.pk, f'{uploaded.id}.txt')


@pytest.mark.django_db
def test_upload_round_trip_hash_matches(uploaded, user):
    """Downloaded bytes hash to the stored content hash."""
    record, stream = open_file_content(user, uploaded.id)
    with stream:
        downloaded = stream.read()

    assert downloaded == b'test file content'
    assert calculate_bytes_checksum(downloaded) == record.content_hash


@pytest.mark.django_db
def test_upload_keeps_declared_content_type(user):
    """A specific declared type wins over the extension guess."""
    record = upload_file(
        user.pk,
        'scan.pdf',
        ContentFile(b'%PDF-1.4'),
        content_type='application/x-custom',
    )

    assert record.content_type == 'application/x-custom'


@pytest.mark.django_db
def test_upload_uses_precomputed_hash(user):
    """A hash computed while streaming the body is stored as is."""
    record = upload_file(
        user.pk,
        'notes.txt',
        BytesIO(b'abc'),
        content_hash='1' * 64,
    )

    assert record.content_hash == '1' * 64


@pytest.mark.django_db
@pytest.mark.parametrize(('filename', 'content', 'code'), [
    ('empty.txt', b'', 'File.EmptyFile'),
    ('program.exe', b'MZ', 'File.InvalidFileType'),
    ('huge.txt', b'x' * (1024 * 1024 + 1), 'File.InvalidFileSize'),
])
def test_upload_rejected_before_storage(user, storage_root, filename, content, code):
    """Invalid uploads leave neither a record nor a blob."""
    with pytest.raises(FileValidationError) as exc_info:
        upload_file(user.pk, filename, ContentFile(content))

    assert exc_info.value.code == code
    assert FileRecord.objects.count() == 0
    assert not (storage_root / str(user.pk)).exists()


@pytest.mark.django_db
def test_upload_unknown_owner(db, sample_file_content):
    """Unknown owner is reported as a missing user."""
    with pytest.raises(NotFoundError) as exc_info:
        upload_file(999999, 'test.txt', sample_file_content)

    assert exc_info.value.code == 'User.NotFound'


@pytest.mark.django_db
def test_upload_blob_failure_creates_no_record(user, sample_file_content, monkeypatch):
    """A failed blob write fails the upload and commits nothing."""
    def broken_save(*args, **kwargs):
        raise StorageError()

    monkeypatch.setattr(BlobStore, 'save', broken_save)

    with pytest.raises(UploadFailedError):
        upload_file(user.pk, 'test.txt', sample_file_content)

    assert FileRecord.objects.count() == 0


@pytest.mark.django_db
def test_upload_commit_failure_removes_blob(
    user,
    sample_file_content,
    storage_root,
    monkeypatch,
):
    """A failed record commit rolls the written blob back."""
    def broken_create(**kwargs):
        raise DatabaseError('database is locked')

    monkeypatch.setattr(file_operations, 'create_record', broken_create)

    with pytest.raises(UploadFailedError) as exc_info:
        upload_file(user.pk, 'test.txt', sample_file_content)

    assert exc_info.value.code == 'File.UploadFailed'
    assert FileRecord.objects.count() == 0
    namespace = storage_root / str(user.pk)
    assert not namespace.exists() or list(namespace.iterdir()) == []


@pytest.mark.django_db
def test_replace_updates_metadata(uploaded, user):
    """Replace changes hash, size and modification time but not the id."""
    new_content = ContentFile(b'completely different content')

    record = replace_file_content(user, str(uploaded.id), new_content)

    assert record.id == uploaded.id
    assert record.size_bytes == len(b'completely different content')
    assert record.content_hash == calculate_bytes_checksum(b'completely different content')
    assert record.modified_at > uploaded.modified_at
    assert record.created_at == uploaded.created_at

    _, stream = open_file_content(user, uploaded.id)
    with stream:
        assert stream.read() == b'completely different content'


@pytest.mark.django_db
def test_replace_with_empty_content(uploaded, user):
    """Content can be replaced with nothing."""
    record = replace_file_content(user, uploaded.id, ContentFile(b''))

    assert record.size_bytes == 0
    assert record.content_hash == calculate_bytes_checksum(b'')


@pytest.mark.django_db
def test_replace_too_large(uploaded, user):
    """Oversized replacement is rejected and the old content stays."""
    with pytest.raises(FileValidationError):
        replace_file_content(
            user,
            uploaded.id,
            ContentFile(b'x' * (1024 * 1024 + 1)),
        )

    _, stream = open_file_content(user, uploaded.id)
    with stream:
        assert stream.read() == b'test file content'


@pytest.mark.django_db
def test_replace_storage_failure(uploaded, user, monkeypatch):
    """Overwrite failure is an upload failure and metadata is unchanged."""
    def broken_save(*args, **kwargs):
        raise StorageError()

    monkeypatch.setattr(BlobStore, 'save', broken_save)

    with pytest.raises(UploadFailedError):
        replace_file_content(user, uploaded.id, ContentFile(b'new'))

    assert FileRecord.objects.get(id=uploaded.id).content_hash == uploaded.content_hash


@pytest.mark.django_db
def test_update_file_text(uploaded, user):
    """Text content is stored as UTF-8."""
    record = update_file_text(user, uploaded.id, 'zażółć')

    assert record.size_bytes == len('zażółć'.encode('utf-8'))
    assert record.content_hash == calculate_bytes_checksum('zażółć'.encode('utf-8'))


@pytest.mark.django_db
def test_foreign_file_is_not_found(uploaded, other_user):
    """Another owner's file is indistinguishable from a missing one."""
    with pytest.raises(NotFoundError):
        open_file_content(other_user, uploaded.id)
    with pytest.raises(NotFoundError):
        replace_file_content(other_user, uploaded.id, ContentFile(b'x'))
    with pytest.raises(NotFoundError):
        delete_file(other_user, uploaded.id)

    assert FileRecord.objects.filter(id=uploaded.id).exists()


@pytest.mark.django_db
def test_malformed_id(user):
    """Malformed ids are rejected before any lookup."""
    with pytest.raises(InvalidIdentifierError):
        open_file_content(user, 'not-a-uuid')


@pytest.mark.django_db
def test_open_missing_blob(uploaded, user, blob_store):
    """A record without its blob downloads as not found."""
    blob_store.delete(user.pk, uploaded.get_stored_name())

    with pytest.raises(NotFoundError):
        open_file_content(user, uploaded.id)


@pytest.mark.django_db
def test_delete_file(uploaded, user, blob_store):
    """Delete removes record and blob."""
    delete_file(user, uploaded.id)

    assert not FileRecord.objects.filter(id=uploaded.id).exists()
    assert not blob_store.exists(user.pk, uploaded.get_stored_name())


@pytest.mark.django_db
def test_delete_file_survives_blob_failure(uploaded, user, monkeypatch):
    """The record is removed even if the blob delete fails."""
    def broken_delete(*args, **kwargs):
        raise StorageError()

    monkeypatch.setattr(BlobStore, 'delete', broken_delete)

    delete_file(user, uploaded.id)

    assert not FileRecord.objects.filter(id=uploaded.id).exists()


@pytest.mark.django_db
def test_delete_files_mixed_ids(user, other_user, storage_root):
    """Batch delete removes owned files and reports the rest per id."""
    owned = upload_file(user.pk, 'a.txt', ContentFile(b'a'))
    foreign = upload_file(other_user.pk, 'b.txt', ContentFile(b'b'))

    result = delete_files(user, [str(owned.id), str(foreign.id), 'garbage'])

    assert result['deletedCount'] == 1
    assert result['results'] == [
        {'id': str(owned.id), 'status': STATUS_DELETED},
        {'id': str(foreign.id), 'status': STATUS_NOT_FOUND},
        {'id': 'garbage', 'status': STATUS_INVALID_ID},
    ]
    assert not FileRecord.objects.filter(id=owned.id).exists()
    assert FileRecord.objects.filter(id=foreign.id).exists()
    assert not (storage_root / str(user.pk)).exists()
    assert (storage_root / str(other_user.pk)).exists()


@pytest.mark.django_db
def test_delete_files_duplicate_ids(uploaded, user):
    """The same id twice deletes the file once."""
    result = delete_files(user, [str(uploaded.id), str(uploaded.id)])

    assert result['deletedCount'] == 1
    assert [item['status'] for item in result['results']] == [STATUS_DELETED] * 2


@pytest.mark.django_db
def test_delete_files_nothing_owned(user, other_user):
    """Batch delete with no owned file is not found."""
    foreign = upload_file(other_user.pk, 'b.txt', ContentFile(b'b'))

    with pytest.raises(NotFoundError):
        delete_files(user, [str(foreign.id), str(uuid.uuid4())])

    assert FileRecord.objects.filter(id=foreign.id).exists()


@pytest.mark.django_db
def test_list_and_stats(user, other_user):
    """Listing and stats only see the owner's files."""
    upload_file(user.pk, 'a.txt', ContentFile(b'aaa'))
    upload_file(user.pk, 'b.md', ContentFile(b'bb'))
    upload_file(other_user.pk, 'c.txt', ContentFile(b'c'))

    assert {record.original_name for record in list_files(user)} == {'a.txt', 'b.md'}
    assert get_storage_stats(user) == {'totalFiles': 2, 'totalSizeBytes': 5}


@pytest.mark.django_db
def test_serialize_record(uploaded, user):
    """Serialized record uses camelCase keys and string ids."""
    data = serialize_record(uploaded)

    assert data['id'] == str(uploaded.id)
    assert data['originalName'] == 'test.txt'
    assert data['size'] == uploaded.size_bytes
    assert data['contentHash'] == uploaded.content_hash
    assert data['ownerUsername'] == user.username
    assert data['createdAt'] == uploaded.created_at.isoformat()
