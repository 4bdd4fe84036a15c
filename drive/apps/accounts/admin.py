"""Django admin configuration for accounts app."""

from typing import override

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from drive.apps.accounts.models import ApiToken


@admin.register(ApiToken)
class ApiTokenAdmin(admin.ModelAdmin[ApiToken]):
    """Admin interface for ApiToken model.

    Tokens can be inspected and revoked (deleted) but not created or
    edited here.
    """

    list_display = [
        'key_short',
        'user',
        'user_agent_short',
        'created_at',
        'last_used_at',
    ]

    list_filter = [
        'created_at',
        'last_used_at',
    ]

    search_fields = [
        'user__username',
        'user__email',
        'user_agent',
    ]

    readonly_fields = [
        'key',
        'user',
        'user_agent',
        'created_at',
        'last_used_at',
    ]

    def key_short(self, obj: ApiToken) -> str:
        """Display truncated token key.

        Args:
            obj: ApiToken instance.

        Returns:
            First 8 characters of the key.
        """
        return f'{obj.key[:8]}...'
    key_short.short_description = 'Token'  # type: ignore[attr-defined]

    def user_agent_short(self, obj: ApiToken) -> str:
        """Display truncated user agent, or a dash if empty."""
        if not obj.user_agent:
            return '-'
        if len(obj.user_agent) > 50:
            return f'{obj.user_agent[:50]}...'
        return obj.user_agent
    user_agent_short.short_description = 'User Agent'  # type: ignore[attr-defined]

    @override
    def get_queryset(self, request: HttpRequest) -> QuerySet[ApiToken]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('user')

    @override
    def has_add_permission(self, request: HttpRequest) -> bool:
        """Tokens are only issued through login and registration."""
        return False

    @override
    def has_change_permission(
        self,
        request: HttpRequest,
        obj: ApiToken | None = None,
    ) -> bool:
        """Tokens are never edited."""
        return False
