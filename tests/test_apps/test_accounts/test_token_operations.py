"""Tests for API token management."""

from datetime import timedelta

import pytest
from django.utils import timezone

from drive.apps.accounts.logic.token_operations import (
    cleanup_expired_tokens,
    get_user_tokens,
    issue_token,
    resolve_token,
    revoke_token,
)
from drive.apps.accounts.models import TOKEN_KEY_LENGTH, ApiToken


@pytest.mark.django_db
def test_issue_token(user):
    """Issued tokens are opaque hex strings bound to the user."""
    token = issue_token(user, user_agent='pytest')

    assert len(token.key) == TOKEN_KEY_LENGTH
    int(token.key, 16)
    assert token.user == user
    assert token.user_agent == 'pytest'


@pytest.mark.django_db
def test_issue_token_truncates_user_agent(user):
    """Overlong user agents are cut to the column size."""
    token = issue_token(user, user_agent='x' * 500)

    assert len(token.user_agent) == 255


@pytest.mark.django_db
def test_issue_token_evicts_least_recently_used(user, settings):
    """Past the limit the least recently used token is revoked."""
    settings.API_TOKEN_LIMIT = 2
    oldest = issue_token(user)
    ApiToken.objects.filter(pk=oldest.pk).update(
        last_used_at=timezone.now() - timedelta(hours=2),
    )
    recent = issue_token(user)
    ApiToken.objects.filter(pk=recent.pk).update(
        last_used_at=timezone.now() - timedelta(hours=1),
    )

    newest = issue_token(user)

    keys = {token.key for token in get_user_tokens(user)}
    assert keys == {recent.key, newest.key}


@pytest.mark.django_db
def test_token_limit_is_per_user(user, other_user, settings):
    """Other users' tokens do not count against the limit."""
    settings.API_TOKEN_LIMIT = 1
    foreign = issue_token(other_user)

    issue_token(user)

    assert ApiToken.objects.filter(key=foreign.key).exists()


@pytest.mark.django_db
def test_resolve_token_touches_last_used(user):
    """Resolving a token returns its user and refreshes its activity."""
    token = issue_token(user)
    stale = timezone.now() - timedelta(hours=1)
    ApiToken.objects.filter(pk=token.pk).update(last_used_at=stale)

    assert resolve_token(token.key) == user

    token.refresh_from_db()
    assert token.last_used_at > stale


@pytest.mark.django_db
def test_resolve_unknown_token(db):
    """Unknown keys resolve to nobody."""
    assert resolve_token('0' * TOKEN_KEY_LENGTH) is None


@pytest.mark.django_db
def test_resolve_expired_token(user, settings):
    """Tokens idle past the timeout are rejected and removed."""
    settings.API_TOKEN_TTL = 60
    token = issue_token(user)
    ApiToken.objects.filter(pk=token.pk).update(
        last_used_at=timezone.now() - timedelta(seconds=61),
    )

    assert resolve_token(token.key) is None
    assert not ApiToken.objects.filter(pk=token.pk).exists()


@pytest.mark.django_db
def test_resolve_inactive_user(user):
    """Tokens of deactivated users stop working."""
    token = issue_token(user)
    user.is_active = False
    user.save(update_fields=['is_active'])

    assert resolve_token(token.key) is None


@pytest.mark.django_db
def test_revoke_token(user):
    """Revoked tokens no longer resolve."""
    token = issue_token(user)

    assert revoke_token(token.key) is True
    assert revoke_token(token.key) is False
    assert resolve_token(token.key) is None


@pytest.mark.django_db
def test_cleanup_expired_tokens(user, settings):
    """Only idle tokens are cleaned up."""
    settings.API_TOKEN_TTL = 60
    expired = issue_token(user)
    live = issue_token(user)
    ApiToken.objects.filter(pk=expired.pk).update(
        last_used_at=timezone.now() - timedelta(minutes=5),
    )

    assert cleanup_expired_tokens() == 1
    assert list(ApiToken.objects.values_list('key', flat=True)) == [live.key]
