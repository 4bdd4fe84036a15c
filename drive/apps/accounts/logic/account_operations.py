"""Registration and credential checks."""

import logging
from typing import Any, Final

from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db import IntegrityError, transaction
from django.http import HttpRequest

from drive.apps.files.exceptions import (
    AuthenticationFailedError,
    ConflictError,
    DriveError,
)

User = get_user_model()
logger = logging.getLogger(__name__)

_USERNAME_MIN_LENGTH: Final = 3
_USERNAME_MAX_LENGTH: Final = 50
_PASSWORD_MAX_LENGTH: Final = 100


def _validate_registration(
    email: str,
    username: str,
    password: str,
    confirm_password: str,
) -> None:
    try:
        validate_email(email)
    except ValidationError as exc:
        raise DriveError('Invalid email format.', code='User.InvalidEmail') from exc

    if not _USERNAME_MIN_LENGTH <= len(username) <= _USERNAME_MAX_LENGTH:
        raise DriveError(
            'Username must be between {min} and {max} characters.'.format(
                min=_USERNAME_MIN_LENGTH,
                max=_USERNAME_MAX_LENGTH,
            ),
            code='General.ValidationFailed',
        )

    if password != confirm_password:
        raise DriveError('Passwords do not match.', code='User.PasswordMismatch')

    if len(password) > _PASSWORD_MAX_LENGTH:
        raise DriveError(
            'Password does not meet security requirements.',
            code='User.WeakPassword',
        )
    try:
        validate_password(password, user=User(username=username, email=email))
    except ValidationError as exc:
        raise DriveError(' '.join(exc.messages), code='User.WeakPassword') from exc


def register_user(
    email: str,
    username: str,
    password: str,
    confirm_password: str,
) -> User:
    """Create a new user account.

    Args:
        email: Email address, unique case-insensitively.
        username: Username, unique.
        password: Raw password.
        confirm_password: Must equal ``password``.

    Returns:
        Created user.

    Raises:
        DriveError: If any field is invalid.
        ConflictError: If the email or username is taken.
    """
    email = email.strip()
    username = username.strip()
    _validate_registration(email, username, password, confirm_password)

    if User.objects.filter(email__iexact=email).exists():
        raise ConflictError(
            'A user with this email already exists.',
            code='User.EmailAlreadyExists',
        )
    if User.objects.filter(username=username).exists():
        raise ConflictError(
            'A user with this username already exists.',
            code='User.UsernameAlreadyExists',
        )

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                username=username,
                email=email,
                password=password,
            )
    except IntegrityError as exc:
        # Lost a race against a concurrent registration
        raise ConflictError(
            'A user with this username already exists.',
            code='User.UsernameAlreadyExists',
        ) from exc

    logger.info('User registered: %s', username)
    return user


def authenticate_user(
    email: str,
    password: str,
    request: HttpRequest | None = None,
) -> User:
    """Check email and password.

    Unknown email and wrong password are reported the same way.

    Args:
        email: Email address.
        password: Raw password.
        request: Current request, passed to authentication backends.

    Returns:
        Authenticated active user.

    Raises:
        AuthenticationFailedError: If the credentials are wrong.
    """
    candidate = User.objects.filter(email__iexact=email.strip()).first()
    user = None
    if candidate is not None:
        user = authenticate(
            request=request,
            username=candidate.get_username(),
            password=password,
        )

    if user is None:
        logger.warning('Authentication failed for email: %s', email)
        raise AuthenticationFailedError(
            'Invalid email or password.',
            code='User.InvalidCredentials',
        )

    logger.info('User authenticated successfully: %s', user.get_username())
    return user


def serialize_user(user: User, token: str | None = None) -> dict[str, Any]:
    """Build the public JSON representation of a user.

    Args:
        user: User to describe.
        token: Bearer token to include, if one was just issued.

    Returns:
        Dictionary with camelCase keys.
    """
    payload: dict[str, Any] = {
        'userId': str(user.pk),
        'email': user.email,
        'username': user.get_username(),
    }
    if token is not None:
        payload['token'] = token
    return payload
