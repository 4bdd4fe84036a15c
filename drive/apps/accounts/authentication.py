"""Bearer token authentication for API views.

Clients send ``Authorization: Bearer <token>``. The token is resolved
against ``ApiToken`` and the user is stored on ``request.user`` before the
handler runs; a missing or unknown token ends in a 401 envelope.
"""

import logging
from typing import Any, Final, override

from django.http import HttpRequest, HttpResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from drive.apps.accounts.logic.token_operations import resolve_token
from drive.apps.files.exceptions import AuthenticationFailedError

logger = logging.getLogger(__name__)

_AUTH_SCHEME: Final = 'bearer'


def get_bearer_token(request: HttpRequest) -> str | None:
    """Extract the token from the Authorization header.

    Args:
        request: Incoming request.

    Returns:
        Token value, or None if the header is missing or malformed.
    """
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != _AUTH_SCHEME or not token.strip():
        return None
    return token.strip()


def authenticate_request(request: HttpRequest) -> Any:
    """Resolve the bearer token of a request to a user.

    Args:
        request: Incoming request.

    Returns:
        Authenticated user.

    Raises:
        AuthenticationFailedError: If no valid token was sent.
    """
    token = get_bearer_token(request)
    if token is None:
        raise AuthenticationFailedError()

    user = resolve_token(token)
    if user is None:
        logger.info('Rejected bearer token: %s', token[:8])
        raise AuthenticationFailedError(
            'Invalid or expired token.',
            code='User.InvalidToken',
        )
    return user


@method_decorator(csrf_exempt, name='dispatch')
class ApiView(View):
    """Base view for JSON API endpoints.

    API clients authenticate with headers rather than cookies, so CSRF
    protection does not apply.
    """


@method_decorator(csrf_exempt, name='dispatch')
class TokenRequiredView(ApiView):
    """API view that only runs for requests with a valid bearer token."""

    @override
    def dispatch(
        self,
        request: HttpRequest,
        *args: Any,
        **kwargs: Any,
    ) -> HttpResponse:
        """Authenticate, then dispatch to the method handler."""
        request.user = authenticate_request(request)
        request.auth_token = get_bearer_token(request)  # type: ignore[attr-defined]
        return super().dispatch(request, *args, **kwargs)
