"""Upload rules shared by the API and the folder sync client."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Final, final

from django.conf import settings

from drive.apps.files.exceptions import FileValidationError
from drive.apps.files.infrastructure.metadata import get_file_extension

_BYTES_IN_MB: Final = 1024 * 1024
_DEFAULT_MAX_UPLOAD_SIZE_MB: Final = 50


@final
@dataclass(frozen=True, slots=True)
class UploadRules:
    """Limits a file must satisfy to be accepted.

    An empty ``allowed_extensions`` accepts every extension.
    """

    max_size_bytes: int
    allowed_extensions: frozenset[str]

    @classmethod
    def build(
        cls,
        max_size_mb: int,
        allowed_extensions: Iterable[str],
    ) -> 'UploadRules':
        """Normalize raw settings values.

        Args:
            max_size_mb: Maximum size in megabytes.
            allowed_extensions: Extensions with or without leading dot.

        Returns:
            UploadRules instance.
        """
        extensions = frozenset(
            extension.strip().lstrip('.').lower()
            for extension in allowed_extensions
            if extension.strip()
        )
        return cls(
            max_size_bytes=max_size_mb * _BYTES_IN_MB,
            allowed_extensions=extensions,
        )

    def is_extension_allowed(self, filename: str) -> bool:
        """Case-insensitive extension check."""
        if not self.allowed_extensions:
            return True
        return get_file_extension(filename) in self.allowed_extensions


def get_upload_rules() -> UploadRules:
    """Read upload rules from settings.

    Returns:
        Rules built from ``MAX_UPLOAD_SIZE_MB`` and
        ``ALLOWED_FILE_EXTENSIONS``.
    """
    return UploadRules.build(
        max_size_mb=getattr(
            settings,
            'MAX_UPLOAD_SIZE_MB',
            _DEFAULT_MAX_UPLOAD_SIZE_MB,
        ),
        allowed_extensions=getattr(settings, 'ALLOWED_FILE_EXTENSIONS', ()),
    )


def validate_size(size: int, rules: UploadRules) -> None:
    """Reject empty and oversized content.

    Args:
        size: Content length in bytes.
        rules: Upload rules.

    Raises:
        FileValidationError: If the content is empty or too large.
    """
    if size <= 0:
        raise FileValidationError(
            'File is empty or contains no data.',
            code='File.EmptyFile',
        )
    if size > rules.max_size_bytes:
        raise FileValidationError(
            'File size exceeds the allowed limit of {limit} MB.'.format(
                limit=rules.max_size_bytes // _BYTES_IN_MB,
            ),
            code='File.InvalidFileSize',
        )


def validate_upload(
    filename: str,
    size: int,
    rules: UploadRules | None = None,
) -> None:
    """Check a candidate upload against size and extension rules.

    Runs before any storage is touched.

    Args:
        filename: Original filename.
        size: Content length in bytes.
        rules: Upload rules, read from settings if omitted.

    Raises:
        FileValidationError: If the file breaks a rule.
    """
    if rules is None:
        rules = get_upload_rules()
    if not filename or not filename.strip():
        raise FileValidationError(
            'File name is required.',
            code='File.EmptyFile',
        )
    validate_size(size, rules)
    if not rules.is_extension_allowed(filename):
        raise FileValidationError(
            'File type .{extension} is not allowed.'.format(
                extension=get_file_extension(filename) or '(none)',
            ),
            code='File.InvalidFileType',
        )
