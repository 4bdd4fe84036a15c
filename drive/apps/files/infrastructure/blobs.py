"""Per-owner blob store over the configured Django storage backend.

Every blob lives at ``{owner_id}/{stored_name}``. The owner directory
(or key prefix on S3) is the owner's namespace.
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import IO, final

from django.core.files import File as DjangoFile
from django.core.files.storage import Storage, default_storage

from drive.apps.files.exceptions import StorageError

logger = logging.getLogger(__name__)


def build_blob_path(owner_id: int | str, stored_name: str) -> str:
    """Join owner namespace and blob name.

    Args:
        owner_id: Owner primary key.
        stored_name: ``{file_id}{extension}``.

    Returns:
        Storage path, e.g. ``'7/3f2a....pdf'``.
    """
    return f'{owner_id}/{stored_name}'


@final
class BlobStore:
    """Save, open and delete owner-scoped blobs.

    Not-found is never an error here: ``open`` returns ``None`` and
    ``delete`` is a no-op. Backend failures on write and delete are
    raised as ``StorageError``.
    """

    def __init__(self, storage: Storage) -> None:
        """Initialize BlobStore.

        Args:
            storage: Django storage backend holding the blobs.
        """
        self._storage = storage

    def save(self, owner_id: int, stored_name: str, content: IO[bytes]) -> str:
        """Write content, replacing any existing blob at the same path.

        Args:
            owner_id: Owner primary key.
            stored_name: Blob name inside the namespace.
            content: Readable stream, consumed from offset 0.

        Returns:
            Storage path of the written blob.

        Raises:
            StorageError: If the backend fails to write.
        """
        path = build_blob_path(owner_id, stored_name)
        if not isinstance(content, DjangoFile):
            content = DjangoFile(content, name=stored_name)
        content.seek(0)
        try:
            saved_path = self._storage.save(path, content)
        except Exception as exc:
            logger.exception('Blob write failed: %s', path)
            raise StorageError(f'Failed to write blob {path}.') from exc
        if saved_path != path:
            # Backend refused to overwrite and picked another name
            self._storage.delete(saved_path)
            raise StorageError(f'Storage backend renamed blob {path}.')
        return saved_path

    def open(self, owner_id: int, stored_name: str) -> IO[bytes] | None:
        """Open a blob for reading.

        Args:
            owner_id: Owner primary key.
            stored_name: Blob name inside the namespace.

        Returns:
            Binary stream positioned at 0, or None if there is no blob.
        """
        path = build_blob_path(owner_id, stored_name)
        try:
            return self._storage.open(path, 'rb')
        except FileNotFoundError:
            logger.info('Blob not found: %s', path)
            return None

    def exists(self, owner_id: int, stored_name: str) -> bool:
        """Check whether a blob is present."""
        return self._storage.exists(build_blob_path(owner_id, stored_name))

    def modified_time(self, owner_id: int | str, stored_name: str) -> datetime | None:
        """Get when a blob was last written.

        Returns:
            Modification time, or None if the blob is absent.

        Raises:
            StorageError: If the backend cannot report the time.
        """
        path = build_blob_path(owner_id, stored_name)
        try:
            return self._storage.get_modified_time(path)
        except FileNotFoundError:
            return None
        except Exception as exc:
            logger.exception('Blob stat failed: %s', path)
            raise StorageError(f'Failed to stat blob {path}.') from exc

    def delete(self, owner_id: int | str, stored_name: str) -> None:
        """Remove a blob, doing nothing when it is absent.

        Args:
            owner_id: Owner primary key.
            stored_name: Blob name inside the namespace.

        Raises:
            StorageError: If the backend fails to delete.
        """
        path = build_blob_path(owner_id, stored_name)
        try:
            self._storage.delete(path)
        except FileNotFoundError:
            logger.debug('Blob already absent: %s', path)
        except Exception as exc:
            logger.exception('Blob delete failed: %s', path)
            raise StorageError(f'Failed to delete blob {path}.') from exc

    def delete_many(self, owner_id: int, stored_names: Iterable[str]) -> int:
        """Remove several blobs, then the namespace if it ended up empty.

        Each removal is independent: a failure is logged and the rest
        are still attempted.

        Args:
            owner_id: Owner primary key.
            stored_names: Blob names inside the namespace.

        Returns:
            Number of blobs removed without error.
        """
        removed = 0
        for stored_name in stored_names:
            try:
                self.delete(owner_id, stored_name)
            except StorageError:
                logger.warning(
                    'Skipping blob that could not be deleted: %s',
                    build_blob_path(owner_id, stored_name),
                )
                continue
            removed += 1
        self.remove_namespace_if_empty(owner_id)
        return removed

    def remove_namespace_if_empty(self, owner_id: int | str) -> bool:
        """Drop the owner namespace when no blobs remain in it.

        Args:
            owner_id: Owner primary key.

        Returns:
            True if the namespace was removed.
        """
        namespace = str(owner_id)
        remove_namespace = getattr(self._storage, 'remove_namespace', None)
        if remove_namespace is None:
            return False
        try:
            return bool(remove_namespace(namespace))
        except Exception:
            logger.exception('Failed to remove namespace: %s', namespace)
            return False

    def rollback(self, owner_id: int, stored_name: str) -> None:
        """Best-effort blob removal used by compensations.

        Never raises, logs instead. A blob left behind here is picked up
        by the ``cleanup_orphaned_blobs`` command.

        Args:
            owner_id: Owner primary key.
            stored_name: Blob name inside the namespace.
        """
        path = build_blob_path(owner_id, stored_name)
        try:
            self.delete(owner_id, stored_name)
        except StorageError:
            logger.exception('Rollback failed for blob: %s', path)
            return
        logger.warning('Rolled back blob: %s', path)

    def list_namespaces(self) -> list[str]:
        """List owner namespaces present in the backend."""
        try:
            directories, _ = self._storage.listdir('')
        except FileNotFoundError:
            return []
        return sorted(directories)

    def list_blobs(self, owner_id: int | str) -> list[str]:
        """List blob names inside one namespace.

        Temporary files of in-flight writes are not included.

        Args:
            owner_id: Owner primary key or namespace name.

        Returns:
            Blob names sorted alphabetically.
        """
        try:
            _, files = self._storage.listdir(str(owner_id))
        except FileNotFoundError:
            return []
        return sorted(name for name in files if not name.startswith('.'))


def get_blob_store(storage: Storage | None = None) -> BlobStore:
    """Build a BlobStore over the configured default storage.

    Args:
        storage: Storage backend, ``default_storage`` if omitted.

    Returns:
        BlobStore instance.
    """
    return BlobStore(default_storage if storage is None else storage)
