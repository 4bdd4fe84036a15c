"""Shared fixtures for all tests."""

import pytest
from django.contrib.auth import get_user_model
from django.test import Client

from drive.apps.accounts.logic.token_operations import issue_token

User = get_user_model()


@pytest.fixture(autouse=True)
def storage_root(settings, tmp_path):
    """Point the default storage at a temporary directory.

    Returns:
        Root directory of the local file storage.
    """
    root = tmp_path / 'storage'
    settings.STORAGES = {
        'default': {
            'BACKEND': 'drive.apps.files.infrastructure.storage.LocalFileStorage',
            'OPTIONS': {'location': str(root)},
        },
        'staticfiles': {
            'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
        },
    }
    return root


@pytest.fixture(autouse=True)
def upload_rules(settings):
    """Pin upload rules regardless of the local environment."""
    settings.MAX_UPLOAD_SIZE_MB = 1
    settings.ALLOWED_FILE_EXTENSIONS = ('txt', 'md', 'pdf', 'jpg', 'png')


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def token(user):
    """Issue a bearer token for the test user.

    Returns:
        Token key.
    """
    return issue_token(user).key


@pytest.fixture
def auth_client(token):
    """Django test client sending the test user's bearer token.

    Returns:
        Authenticated Client.
    """
    return Client(headers={'Authorization': f'Bearer {token}'})


@pytest.fixture
def other_client(other_user):
    """Django test client authenticated as the other user.

    Returns:
        Authenticated Client.
    """
    key = issue_token(other_user).key
    return Client(headers={'Authorization': f'Bearer {key}'})
