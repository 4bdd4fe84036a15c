"""Metadata extraction utilities for files."""

import hashlib
import mimetypes
from pathlib import Path
from typing import IO, Final

from drive.apps.files.models import DEFAULT_CONTENT_TYPE

_CHUNK_SIZE: Final = 64 * 1024  # 64KB chunks for checksum calculation


def calculate_checksum(file_obj: IO[bytes]) -> str:
    """Calculate SHA256 checksum of file.

    Reads file in chunks to handle large files efficiently.
    Resets file pointer to beginning after calculation, so the same
    object can be handed to storage right away.

    Args:
        file_obj: Seekable file-like object to checksum.

    Returns:
        Lowercase hex-encoded SHA256 hash string (64 characters).
    """
    sha256_hash = hashlib.sha256()

    file_obj.seek(0)

    for chunk in iter(lambda: file_obj.read(_CHUNK_SIZE), b''):
        sha256_hash.update(chunk)

    file_obj.seek(0)

    return sha256_hash.hexdigest()


def calculate_bytes_checksum(content: bytes) -> str:
    """Calculate SHA256 checksum of an in-memory payload.

    Args:
        content: Raw bytes.

    Returns:
        Lowercase hex-encoded SHA256 hash string.
    """
    return hashlib.sha256(content).hexdigest()


def detect_mime_type(filename: str, declared: str | None = None) -> str:
    """Pick the MIME type stored for a file.

    The type declared by the client wins unless it is missing or the
    generic octet-stream value; otherwise it is guessed from the
    filename extension.

    Args:
        filename: Filename with extension.
        declared: Content type sent by the client, if any.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    if declared and declared != DEFAULT_CONTENT_TYPE:
        return declared
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return DEFAULT_CONTENT_TYPE
    return mime_type


def get_file_size(file_obj: IO[bytes]) -> int:
    """Get file size from file object.

    Uses the ``size`` attribute of Django files when present,
    otherwise seeks to the end.

    Args:
        file_obj: Seekable file-like object.

    Returns:
        File size in bytes.
    """
    size = getattr(file_obj, 'size', None)
    if size is not None:
        return size
    file_obj.seek(0, 2)
    file_size = file_obj.tell()
    file_obj.seek(0)
    return file_size


def get_file_extension(filename: str) -> str:
    """Get file extension from filename.

    Args:
        filename: Filename (e.g., 'document.PDF').

    Returns:
        Extension without dot, lowercase (e.g., 'pdf').
        Returns empty string if no extension.
    """
    extension = Path(filename).suffix
    return extension.lstrip('.').lower()
