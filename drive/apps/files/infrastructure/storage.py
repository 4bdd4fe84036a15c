"""Custom storage backends for file blobs."""

import logging
import os
import tempfile
from typing import Any, final, override

from django.core.files.storage import FileSystemStorage
from storages.backends.s3 import S3Storage

logger = logging.getLogger(__name__)

_PARTIAL_SUFFIX = '.part'


@final
class LocalFileStorage(FileSystemStorage):
    """Filesystem storage backend for user files.

    Extends Django's FileSystemStorage with:
    - Overwrite in place (content replace keeps the blob name)
    - Atomic writes through a temporary sibling and ``os.replace``
    - Removal of empty owner namespaces
    """

    @override
    def __init__(self, **kwargs: Any) -> None:
        """Initialize storage, allowing overwrites unless told otherwise.

        Args:
            kwargs: FileSystemStorage options (location, base_url, ...).
        """
        kwargs.setdefault('allow_overwrite', True)
        super().__init__(**kwargs)

    @override
    def _save(self, name: str, content: Any) -> str:
        """Write content next to its final path, then rename into place.

        A reader never observes a half-written blob: until ``os.replace``
        succeeds the final path holds either nothing or the previous
        content.

        Args:
            name: Storage path for the file.
            content: Django File wrapping the content.

        Returns:
            Storage path used.
        """
        full_path = self.path(name)
        directory = os.path.dirname(full_path)
        os.makedirs(directory, exist_ok=True)

        descriptor, temp_path = tempfile.mkstemp(
            dir=directory,
            prefix='.',
            suffix=_PARTIAL_SUFFIX,
        )
        try:
            with os.fdopen(descriptor, 'wb') as temp_file:
                for chunk in content.chunks():
                    temp_file.write(chunk)
            if self.file_permissions_mode is not None:
                os.chmod(temp_path, self.file_permissions_mode)
            os.replace(temp_path, full_path)
        except Exception:
            logger.exception('Failed to write file to storage: %s', name)
            if os.path.exists(temp_path):
                os.remove(temp_path)
            raise

        logger.info('Wrote file to storage: %s', name)
        return str(name).replace('\\', '/')

    @override
    def delete(self, name: str) -> None:
        """Delete file from disk with logging.

        Args:
            name: Storage path of file to delete.
        """
        logger.info('Deleting file from storage: %s', name)
        super().delete(name)

    def remove_namespace(self, namespace: str) -> bool:
        """Remove an owner directory if it is empty.

        Args:
            namespace: Owner directory relative to the storage root.

        Returns:
            True if the directory was removed.
        """
        try:
            os.rmdir(self.path(namespace))
        except FileNotFoundError:
            return False
        except OSError:
            # Not empty, e.g. a concurrent upload landed meanwhile
            logger.debug('Namespace not removed, not empty: %s', namespace)
            return False
        logger.info('Removed empty namespace: %s', namespace)
        return True


@final
class S3FileStorage(S3Storage):
    """Custom S3 storage backend for user files.

    Extends django-storages S3Storage with:
    - Enhanced error logging
    - Namespace hook shared with the local backend (S3 prefixes are
      implicit, so there is nothing to remove)
    """

    @override
    def save(  # noqa: WPS211
        self,
        name: str,
        content: Any,
        max_length: int | None = None,
    ) -> str:
        """Save file to S3 with error handling and logging.

        Args:
            name: Storage path for the file.
            content: File content (file-like object).
            max_length: Optional maximum length for the filename.

        Returns:
            Actual storage path used.

        Raises:
            Exception: If S3 upload fails.
        """
        try:
            logger.info('Uploading file to storage: %s', name)
            saved_name = super().save(name, content, max_length)
            logger.info('Successfully uploaded file: %s', saved_name)
        except Exception:
            logger.exception('Failed to upload file to storage: %s', name)
            raise
        else:
            return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete file from S3 with error handling and logging.

        Args:
            name: Storage path of file to delete.

        Raises:
            Exception: If S3 delete fails.
        """
        try:
            logger.info('Deleting file from storage: %s', name)
            super().delete(name)
            logger.info('Successfully deleted file: %s', name)
        except Exception:
            logger.exception('Failed to delete file from storage: %s', name)
            raise

    def remove_namespace(self, namespace: str) -> bool:
        """Namespaces are key prefixes in S3 and vanish with their keys.

        Args:
            namespace: Owner prefix.

        Returns:
            Always False, nothing is removed.
        """
        return False
