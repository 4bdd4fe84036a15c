"""JSON envelope shared by all API views.

Success: ``{"success": true, "message": ..., "data": ...}``
Failure: ``{"success": false, "error": {"code", "message", "type"}}``
"""

import json
from http import HTTPStatus
from typing import Any, Final

from django.http import HttpRequest, JsonResponse

from drive.apps.files.exceptions import DriveError, ErrorType, FileValidationError

ERROR_STATUS: Final = {
    ErrorType.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorType.VALIDATION: HTTPStatus.BAD_REQUEST,
    ErrorType.UNAUTHORIZED: HTTPStatus.UNAUTHORIZED,
    ErrorType.CONFLICT: HTTPStatus.CONFLICT,
    ErrorType.UNEXPECTED: HTTPStatus.INTERNAL_SERVER_ERROR,
}


def success_response(
    data: Any = None,
    message: str = '',
    status: int = HTTPStatus.OK,
) -> JsonResponse:
    """Wrap a payload in the success envelope."""
    return JsonResponse(
        {'success': True, 'message': message, 'data': data},
        status=status,
    )


def error_response(
    code: str,
    message: str,
    error_type: ErrorType,
) -> JsonResponse:
    """Build the failure envelope with the status of its error type.

    Args:
        code: Machine readable error code.
        message: Human readable message.
        error_type: Category deciding the HTTP status.

    Returns:
        JsonResponse; unknown categories get 400.
    """
    return JsonResponse(
        {
            'success': False,
            'error': {
                'code': code,
                'message': message,
                'type': str(error_type),
            },
        },
        status=ERROR_STATUS.get(error_type, HTTPStatus.BAD_REQUEST),
    )


def drive_error_response(error: DriveError) -> JsonResponse:
    """Convert a raised DriveError into its envelope."""
    return error_response(error.code, error.message, error.error_type)


def parse_json_body(request: HttpRequest) -> dict[str, Any]:
    """Decode a JSON object request body.

    Args:
        request: Incoming request.

    Returns:
        Decoded object, empty for an empty body.

    Raises:
        FileValidationError: If the body is not a JSON object.
    """
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise FileValidationError('Request body is not valid JSON.') from exc
    if not isinstance(payload, dict):
        raise FileValidationError('Request body must be a JSON object.')
    return payload
