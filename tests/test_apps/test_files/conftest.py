"""Shared fixtures for files app tests."""

import boto3
import pytest
from django.core.files.base import ContentFile
from moto import mock_aws

from drive.apps.files.infrastructure.blobs import BlobStore, get_blob_store
from drive.apps.files.infrastructure.storage import S3FileStorage

_TEST_BUCKET = 'drive-test'


@pytest.fixture
def mock_s3():
    """Mock S3 service with a test bucket.

    Yields:
        boto3 S3 resource with the test bucket created.
    """
    with mock_aws():
        # Create S3 resource
        conn = boto3.resource('s3', region_name='us-east-1')

        # Create bucket
        conn.create_bucket(Bucket=_TEST_BUCKET)

        yield conn


@pytest.fixture
def s3_storage(mock_s3):
    """S3 storage backend talking to the mocked bucket.

    Returns:
        S3FileStorage instance.
    """
    return S3FileStorage(
        bucket_name=_TEST_BUCKET,
        access_key='testing',
        secret_key='testing',
        region_name='us-east-1',
        file_overwrite=True,
        default_acl=None,
    )


@pytest.fixture
def blob_store():
    """Blob store over the temporary local storage.

    Returns:
        BlobStore instance.
    """
    return get_blob_store()


@pytest.fixture
def s3_blob_store(s3_storage):
    """Blob store over the mocked S3 bucket.

    Returns:
        BlobStore instance.
    """
    return BlobStore(s3_storage)


@pytest.fixture
def sample_file_content():
    """Sample file content for testing.

    Returns:
        ContentFile with test data.
    """
    return ContentFile(b'test file content', name='test.txt')
