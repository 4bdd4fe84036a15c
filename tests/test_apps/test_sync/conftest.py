"""Shared fixtures for sync client tests."""

import hashlib
import uuid

import pytest

from drive.apps.sync.exceptions import SyncTransportError
from drive.apps.sync.structures import RemoteFile


class FakeTransport:
    """In-memory stand-in for the files API.

    Names in ``fail_uploads`` and ids in ``fail_deletes`` make the
    matching calls raise ``SyncTransportError``.
    """

    def __init__(self, remote_files=()):
        self.remote_files = list(remote_files)
        self.uploaded = {}
        self.calls = []
        self.fail_uploads = set()
        self.fail_deletes = set()

    def list_files(self):
        self.calls.append(('list', None))
        return list(self.remote_files)

    def upload_file(self, name, content):
        self.calls.append(('upload', name))
        if name in self.fail_uploads:
            raise SyncTransportError('Upload refused.', code='File.UploadFailed')
        data = content.read()
        self.uploaded[name] = data
        remote = RemoteFile(
            id=str(uuid.uuid4()),
            original_name=name,
            content_hash=hashlib.sha256(data).hexdigest(),
            size=len(data),
        )
        self.remote_files.append(remote)
        return remote

    def delete_file(self, file_id):
        self.calls.append(('delete', file_id))
        if file_id in self.fail_deletes:
            raise SyncTransportError('Delete refused.', code='File.NotFound')
        self.remote_files = [
            remote for remote in self.remote_files if remote.id != file_id
        ]


@pytest.fixture
def transport():
    """Empty fake server.

    Returns:
        FakeTransport instance.
    """
    return FakeTransport()


@pytest.fixture
def local_folder(tmp_path):
    """Folder to synchronize.

    Returns:
        Path of an empty directory.
    """
    folder = tmp_path / 'local'
    folder.mkdir()
    return folder


def sha256_of(content):
    """Hash helper matching the server algorithm."""
    return hashlib.sha256(content).hexdigest()


@pytest.fixture
def remote_file():
    """Factory for server file entries.

    Returns:
        Callable building a RemoteFile from a name and content.
    """
    def factory(name, content, file_id=None):
        return RemoteFile(
            id=file_id or str(uuid.uuid4()),
            original_name=name,
            content_hash=sha256_of(content),
            size=len(content),
        )
    return factory
