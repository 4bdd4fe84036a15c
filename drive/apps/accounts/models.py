"""Database models for API token management."""

from typing import ClassVar, Final, final, override

from django.conf import settings
from django.db import models
from django.utils import timezone

# Constants for field max lengths
TOKEN_KEY_LENGTH: Final = 40
_USER_AGENT_MAX_LENGTH: Final = 255


@final
class ApiToken(models.Model):
    """Opaque bearer token issued on registration and login.

    The key means nothing by itself, it is only looked up here. A token
    idle for longer than ``API_TOKEN_TTL`` seconds is expired.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='api_tokens',
        db_index=True,
    )

    key = models.CharField(
        max_length=TOKEN_KEY_LENGTH,
        unique=True,
        help_text='Bearer token value',
    )

    user_agent = models.CharField(
        max_length=_USER_AGENT_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Client user agent string',
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text='Token issue time',
    )

    last_used_at = models.DateTimeField(
        default=timezone.now,
        db_index=True,
        help_text='Last authenticated request',
    )

    class Meta:
        """Model metadata."""

        verbose_name = 'API token'  # type: ignore[mutable-override]
        verbose_name_plural = 'API tokens'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['-last_used_at']

        indexes: ClassVar[list[models.Index]] = [
            models.Index(
                fields=['user', '-last_used_at'],
                name='accounts_user_activity_idx',
            ),
        ]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.get_username()} ({self.key[:8]})'
