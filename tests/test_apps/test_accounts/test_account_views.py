"""Tests for the authentication API endpoints."""

import pytest

from drive.apps.accounts.models import ApiToken

_AUTH_URL = '/api/auth'


@pytest.mark.django_db
class TestRegister:
    """POST /api/auth/register."""

    def test_register_returns_token(self, client):
        """New accounts are logged in right away."""
        response = client.post(
            f'{_AUTH_URL}/register',
            {
                'email': 'new@example.com',
                'username': 'newbie',
                'password': 'secret123',
                'confirmPassword': 'secret123',
            },
            content_type='application/json',
        )

        assert response.status_code == 201
        data = response.json()['data']
        assert data['email'] == 'new@example.com'
        assert data['username'] == 'newbie'
        assert ApiToken.objects.filter(key=data['token']).exists()

    def test_register_conflict(self, client, user):
        """Taken emails answer 409."""
        response = client.post(
            f'{_AUTH_URL}/register',
            {
                'email': 'test@example.com',
                'username': 'another',
                'password': 'secret123',
                'confirmPassword': 'secret123',
            },
            content_type='application/json',
        )

        assert response.status_code == 409
        assert response.json()['error']['type'] == 'Conflict'

    def test_register_missing_fields(self, client):
        """Missing fields are a validation error."""
        response = client.post(
            f'{_AUTH_URL}/register',
            {},
            content_type='application/json',
        )

        assert response.status_code == 400
        assert response.json()['success'] is False


@pytest.mark.django_db
class TestLogin:
    """POST /api/auth/login."""

    def test_login_success(self, client, user):
        """Valid credentials yield a working token."""
        response = client.post(
            f'{_AUTH_URL}/login',
            {'email': 'test@example.com', 'password': 'testpass123'},
            content_type='application/json',
            headers={'User-Agent': 'sync-client/1.0'},
        )

        assert response.status_code == 200
        token = response.json()['data']['token']
        stored = ApiToken.objects.get(key=token)
        assert stored.user == user
        assert stored.user_agent == 'sync-client/1.0'

    def test_login_wrong_password(self, client, user):
        """Wrong credentials answer 401."""
        response = client.post(
            f'{_AUTH_URL}/login',
            {'email': 'test@example.com', 'password': 'nope'},
            content_type='application/json',
        )

        assert response.status_code == 401
        assert response.json()['error']['code'] == 'User.InvalidCredentials'


@pytest.mark.django_db
class TestSession:
    """GET /api/auth/me and POST /api/auth/logout."""

    def test_me(self, auth_client, user):
        """The token owner is described."""
        response = auth_client.get(f'{_AUTH_URL}/me')

        assert response.status_code == 200
        data = response.json()['data']
        assert data['userId'] == str(user.pk)
        assert data['activeTokens'] == 1
        assert 'token' not in data

    def test_me_requires_token(self, client):
        """Anonymous callers are rejected."""
        assert client.get(f'{_AUTH_URL}/me').status_code == 401

    def test_logout_revokes_token(self, auth_client, token):
        """After logout the same token is rejected."""
        response = auth_client.post(f'{_AUTH_URL}/logout')

        assert response.status_code == 200
        assert not ApiToken.objects.filter(key=token).exists()
        assert auth_client.get(f'{_AUTH_URL}/me').status_code == 401
