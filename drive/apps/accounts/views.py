"""API views for registration, login and the current user."""

from http import HTTPStatus
from typing import Any

from django.http import HttpRequest, JsonResponse

from drive.apps.accounts.authentication import ApiView, TokenRequiredView
from drive.apps.accounts.logic.account_operations import (
    authenticate_user,
    register_user,
    serialize_user,
)
from drive.apps.accounts.logic.token_operations import (
    get_user_tokens,
    issue_token,
    revoke_token,
)
from drive.apps.files.responses import parse_json_body, success_response


def _user_agent(request: HttpRequest) -> str:
    return request.headers.get('User-Agent', '')


def _string_field(payload: dict[str, Any], name: str) -> str:
    field_value = payload.get(name)
    return field_value if isinstance(field_value, str) else ''


class RegisterView(ApiView):
    """POST /api/auth/register."""

    def post(self, request: HttpRequest) -> JsonResponse:
        """Create an account and log it in."""
        payload = parse_json_body(request)
        user = register_user(
            email=_string_field(payload, 'email'),
            username=_string_field(payload, 'username'),
            password=_string_field(payload, 'password'),
            confirm_password=_string_field(payload, 'confirmPassword'),
        )
        token = issue_token(user, _user_agent(request))
        return success_response(
            serialize_user(user, token.key),
            message='Registration successful.',
            status=HTTPStatus.CREATED,
        )


class LoginView(ApiView):
    """POST /api/auth/login."""

    def post(self, request: HttpRequest) -> JsonResponse:
        """Exchange email and password for a bearer token."""
        payload = parse_json_body(request)
        user = authenticate_user(
            email=_string_field(payload, 'email'),
            password=_string_field(payload, 'password'),
            request=request,
        )
        token = issue_token(user, _user_agent(request))
        return success_response(
            serialize_user(user, token.key),
            message='Login successful.',
        )


class MeView(TokenRequiredView):
    """GET /api/auth/me."""

    def get(self, request: HttpRequest) -> JsonResponse:
        """Describe the authenticated user."""
        payload = serialize_user(request.user)
        payload['activeTokens'] = len(get_user_tokens(request.user))
        return success_response(payload, message='Current user.')


class LogoutView(TokenRequiredView):
    """POST /api/auth/logout."""

    def post(self, request: HttpRequest) -> JsonResponse:
        """Revoke the token used for this request."""
        revoke_token(request.auth_token)  # type: ignore[attr-defined]
        return success_response(message='Logged out.')
