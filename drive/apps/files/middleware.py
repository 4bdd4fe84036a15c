"""Middleware turning exceptions escaping API views into the JSON envelope."""

import logging
from collections.abc import Callable
from typing import Final, final

from django.http import HttpRequest, HttpResponse

from drive.apps.files.exceptions import DriveError, ErrorType
from drive.apps.files.responses import drive_error_response, error_response

logger = logging.getLogger(__name__)

_API_PREFIX: Final = '/api/'


@final
class ApiErrorMiddleware:
    """Answer API failures with the error envelope.

    ``DriveError`` keeps its code, message and type. Anything else is
    logged with its traceback and reported as a generic 500 without
    details. Requests outside ``/api/`` are left to Django.
    """

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]) -> None:
        """Initialize middleware.

        Args:
            get_response: Next handler in the chain.
        """
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """Pass the request on unchanged."""
        return self.get_response(request)

    def process_exception(
        self,
        request: HttpRequest,
        exception: Exception,
    ) -> HttpResponse | None:
        """Convert a view exception into an envelope response.

        Args:
            request: Current request.
            exception: Exception raised by the view.

        Returns:
            Envelope response, or None to let Django handle the request.
        """
        if not request.path.startswith(_API_PREFIX):
            return None
        if isinstance(exception, DriveError):
            logger.info(
                '%s %s failed: %s (%s)',
                request.method,
                request.path,
                exception.code,
                exception.message,
            )
            return drive_error_response(exception)
        logger.exception(
            'Unhandled error in %s %s',
            request.method,
            request.path,
            exc_info=exception,
        )
        return error_response(
            'General.UnexpectedError',
            'An unexpected error occurred.',
            ErrorType.UNEXPECTED,
        )
