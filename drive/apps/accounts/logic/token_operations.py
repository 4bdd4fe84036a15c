"""Bearer token management for API clients.

Issues tokens, resolves them to users and enforces per-user limits.
"""

import logging
import secrets
from datetime import timedelta
from typing import TYPE_CHECKING, Final

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from drive.apps.accounts.models import TOKEN_KEY_LENGTH, ApiToken

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)

# Token length in bytes (generates 40 hex chars)
_TOKEN_BYTES: Final = TOKEN_KEY_LENGTH // 2


def get_token_limit() -> int:
    """Get maximum live tokens per user.

    Returns:
        Token limit from settings or default of 5.
    """
    return getattr(settings, 'API_TOKEN_LIMIT', 5)


def get_token_ttl() -> int:
    """Get token idle timeout in seconds.

    Returns:
        Timeout in seconds from settings or default of 604800 (7 days).
    """
    return getattr(settings, 'API_TOKEN_TTL', 604800)


def issue_token(user: 'User', user_agent: str = '') -> ApiToken:
    """Create a new API token for the user.

    Cleans expired tokens first. When the user already holds the maximum
    number of tokens, the least recently used ones are revoked.

    Args:
        user: Django user the token authenticates.
        user_agent: Client user agent string.

    Returns:
        Created ApiToken instance.
    """
    cleanup_expired_tokens()

    with transaction.atomic():
        # Row-level locking keeps concurrent logins within the limit
        existing_ids = list(
            ApiToken.objects.select_for_update()
            .filter(user=user)
            .order_by('-last_used_at')
            .values_list('id', flat=True),
        )
        limit = get_token_limit()
        evicted_ids = existing_ids[max(limit - 1, 0):]
        if evicted_ids:
            ApiToken.objects.filter(id__in=evicted_ids).delete()
            logger.info(
                'Evicted %d old tokens for user %s',
                len(evicted_ids),
                user.get_username(),
            )

        token = ApiToken.objects.create(
            user=user,
            key=secrets.token_hex(_TOKEN_BYTES),
            user_agent=user_agent[:255],  # Truncate if needed
        )

    logger.info(
        'API token issued for user %s: %s',
        user.get_username(),
        token.key[:8],
    )
    return token


def resolve_token(key: str) -> 'User | None':
    """Find the active user behind a token and mark the token used.

    Expired tokens are deleted on sight.

    Args:
        key: Bearer token value.

    Returns:
        User if the token is valid, None otherwise.
    """
    token = (
        ApiToken.objects
        .select_related('user')
        .filter(key=key)
        .first()
    )
    if token is None:
        return None

    now = timezone.now()
    if token.last_used_at < now - timedelta(seconds=get_token_ttl()):
        logger.info('API token expired: %s', key[:8])
        token.delete()
        return None

    if not token.user.is_active:
        logger.warning(
            'Token of inactive user rejected: %s',
            token.user.get_username(),
        )
        return None

    ApiToken.objects.filter(pk=token.pk).update(last_used_at=now)
    return token.user


def revoke_token(key: str) -> bool:
    """Revoke an API token.

    Args:
        key: Token value to revoke.

    Returns:
        True if token was found and deleted, False otherwise.
    """
    deleted, _ = ApiToken.objects.filter(key=key).delete()

    if deleted:
        logger.info('API token revoked: %s', key[:8])

    return deleted > 0


def cleanup_expired_tokens() -> int:
    """Remove tokens that have been idle past the timeout.

    Returns:
        Number of tokens cleaned up.
    """
    cutoff = timezone.now() - timedelta(seconds=get_token_ttl())

    deleted, _ = ApiToken.objects.filter(last_used_at__lt=cutoff).delete()

    if deleted:
        logger.info('Cleaned up %d expired API tokens', deleted)

    return deleted


def get_user_tokens(user: 'User') -> list[ApiToken]:
    """Get all live tokens of a user, most recently used first."""
    return list(
        ApiToken.objects.filter(user=user).order_by('-last_used_at'),
    )
