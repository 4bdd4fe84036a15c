"""Upload handler that hashes multipart file bodies while they stream in."""

import hashlib
import logging
from typing import Any, override

from django.core.files.uploadhandler import FileUploadHandler
from django.http import HttpRequest

logger = logging.getLogger(__name__)


class ChecksumUploadHandler(FileUploadHandler):
    """Compute SHA256 of each uploaded file chunk by chunk.

    Does not store anything itself: every chunk is passed on to the next
    handler (memory or temporary file). Digests end up in
    ``request.upload_checksums`` keyed by form field name, so the view can
    skip a second pass over the spooled file.

    Must be installed first in ``request.upload_handlers``, before the
    request body is read.
    """

    @override
    def __init__(self, request: HttpRequest | None = None) -> None:
        """Initialize handler and the per-request digest map.

        Args:
            request: Current request.
        """
        super().__init__(request)
        self._hasher: Any = None
        if request is not None and not hasattr(request, 'upload_checksums'):
            request.upload_checksums = {}  # type: ignore[attr-defined]

    @override
    def new_file(self, *args: Any, **kwargs: Any) -> None:
        """Start a fresh digest for the next file field."""
        super().new_file(*args, **kwargs)
        self._hasher = hashlib.sha256()

    @override
    def receive_data_chunk(self, raw_data: bytes, start: int) -> bytes:
        """Feed the chunk to the digest and hand it on unchanged."""
        self._hasher.update(raw_data)
        return raw_data

    @override
    def file_complete(self, file_size: int) -> None:
        """Record the digest; returning None lets the next handler finish."""
        if self.request is not None:
            self.request.upload_checksums[self.field_name] = (  # type: ignore[attr-defined]
                self._hasher.hexdigest()
            )
        logger.debug(
            'Hashed upload field %s (%d bytes)',
            self.field_name,
            file_size,
        )
