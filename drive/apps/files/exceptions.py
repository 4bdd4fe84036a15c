"""Exceptions for files app.

Every expected failure of the API is a ``DriveError`` carrying a stable
``code``, a human readable ``message`` and an ``error_type`` that decides
the HTTP status of the JSON error envelope.
"""

import enum
from typing import ClassVar


class ErrorType(enum.StrEnum):
    """Error categories exposed in the API envelope."""

    NOT_FOUND = 'NotFound'
    VALIDATION = 'Validation'
    UNAUTHORIZED = 'Unauthorized'
    CONFLICT = 'Conflict'
    UNEXPECTED = 'Unexpected'


class DriveError(Exception):
    """Base class for failures reported to API clients."""

    default_code: ClassVar[str] = 'General.ValidationFailed'
    default_message: ClassVar[str] = 'Request data failed validation.'
    error_type: ClassVar[ErrorType] = ErrorType.VALIDATION

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
    ) -> None:
        """Initialize DriveError.

        Args:
            message: Human readable message, class default if omitted.
            code: Machine readable code, class default if omitted.
        """
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)


class FileValidationError(DriveError):
    """Raised when input is rejected before any storage is touched."""


class InvalidIdentifierError(DriveError):
    """Raised when a file id does not parse as a UUID."""

    default_code = 'File.InvalidId'
    default_message = 'Malformed file id.'


class NotFoundError(DriveError):
    """Raised for unknown resources and resources owned by someone else."""

    default_code = 'File.NotFound'
    default_message = 'File not found.'
    error_type = ErrorType.NOT_FOUND


class StorageError(DriveError):
    """Raised when the blob backend fails to write or delete."""

    default_code = 'File.StorageFailed'
    default_message = 'File storage is unavailable.'


class UploadFailedError(DriveError):
    """Raised when an upload could not be made durable.

    Always raised after compensation of the partial work has been tried.
    """

    default_code = 'File.UploadFailed'
    default_message = 'Failed to upload file.'


class AuthenticationFailedError(DriveError):
    """Raised when a request carries no valid credentials."""

    default_code = 'User.Unauthorized'
    default_message = 'Authentication credentials were not provided.'
    error_type = ErrorType.UNAUTHORIZED


class ConflictError(DriveError):
    """Raised when a resource with the same unique key already exists."""

    default_code = 'General.Conflict'
    default_message = 'Resource already exists.'
    error_type = ErrorType.CONFLICT
