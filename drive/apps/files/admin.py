"""Django admin configuration for files app."""

from typing import override

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from drive.apps.files.models import FileRecord


def _format_bytes(size_bytes: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size_bytes: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size_bytes < 1024:
        return f'{size_bytes} B'
    if size_bytes < 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / 1024:.1f} KB'
    if size_bytes < 1024 * 1024 * 1024:  # noqa: WPS531
        return f'{size_bytes / (1024 * 1024):.1f} MB'
    return f'{size_bytes / (1024 * 1024 * 1024):.1f} GB'


@admin.register(FileRecord)
class FileRecordAdmin(admin.ModelAdmin[FileRecord]):
    """Admin interface for FileRecord model.

    Records are read-only here: content and hash must stay in step with
    the blob, which only the API keeps.
    """

    list_display = [
        'original_name',
        'owner',
        'size_display',
        'content_type',
        'created_at',
        'modified_at',
    ]

    list_filter = [
        'content_type',
        'created_at',
        'owner',
    ]

    search_fields = [
        'original_name',
        'content_hash',
        'owner__username',
    ]

    readonly_fields = [
        'id',
        'owner',
        'original_name',
        'stored_name_display',
        'size_bytes',
        'content_type',
        'content_hash',
        'created_at',
        'modified_at',
    ]

    fieldsets = (
        ('File Information', {
            'fields': ('id', 'owner', 'original_name', 'stored_name_display'),
        }),
        ('Metadata', {
            'fields': (
                'size_bytes',
                'content_type',
                'content_hash',
            ),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'modified_at'),
        }),
    )

    def size_display(self, obj: FileRecord) -> str:
        """Display file size in human-readable format.

        Args:
            obj: FileRecord instance.

        Returns:
            Formatted size string (e.g., '1.5 MB', '234 KB').
        """
        return _format_bytes(obj.size_bytes)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def stored_name_display(self, obj: FileRecord) -> str:
        """Display blob path inside the storage backend."""
        return f'{obj.owner_id}/{obj.get_stored_name()}'
    stored_name_display.short_description = 'Blob'  # type: ignore[attr-defined]

    @override
    def get_queryset(self, request: HttpRequest) -> QuerySet[FileRecord]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('owner')

    @override
    def has_add_permission(self, request: HttpRequest) -> bool:
        """Files are only created through upload."""
        return False
