"""Tests for FileRecord model."""

import uuid
from datetime import timedelta

import pytest

from drive.apps.files.models import FileRecord, build_stored_name


@pytest.fixture
def record(user):
    """Create a file record without a blob.

    Returns:
        FileRecord instance.
    """
    return FileRecord.objects.create(
        owner=user,
        original_name='Report.PDF',
        size_bytes=100,
        content_type='application/pdf',
        content_hash='abcd' * 16,
    )


@pytest.mark.django_db
def test_file_record_str(record, user):
    """Test FileRecord __str__ method."""
    assert str(record) == f'{user.id}:Report.PDF'


@pytest.mark.django_db
def test_file_record_get_stored_name(record):
    """Stored name is the id plus the original extension as typed."""
    assert record.get_stored_name() == f'{record.id}.PDF'


@pytest.mark.django_db
def test_file_record_get_extension(record):
    """Test get_extension method extracts extension correctly."""
    assert record.get_extension() == 'pdf'


@pytest.mark.django_db
def test_file_record_defaults(user):
    """Id is generated, timestamps start equal, type defaults to binary."""
    record = FileRecord.objects.create(
        owner=user,
        original_name='blob',
        size_bytes=1,
        content_hash='0' * 64,
    )

    assert isinstance(record.id, uuid.UUID)
    assert record.content_type == 'application/octet-stream'
    assert record.created_at is not None


@pytest.mark.django_db
def test_file_record_ordering(user):
    """Newest records come first."""
    first = FileRecord.objects.create(
        owner=user,
        original_name='a.txt',
        size_bytes=1,
        content_hash='0' * 64,
    )
    second = FileRecord.objects.create(
        owner=user,
        original_name='b.txt',
        size_bytes=1,
        content_hash='1' * 64,
        created_at=first.created_at + timedelta(seconds=1),
    )

    assert list(FileRecord.objects.all()) == [second, first]


def test_build_stored_name_without_extension():
    """A name without extension yields the bare id."""
    record_id = uuid.uuid4()

    assert build_stored_name(record_id, 'Makefile') == str(record_id)
