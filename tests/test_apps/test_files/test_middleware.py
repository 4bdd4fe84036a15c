"""Tests for the API error middleware."""

import json

import pytest
from django.http import HttpResponse
from django.test import RequestFactory

from drive.apps.files.exceptions import (
    ConflictError,
    InvalidIdentifierError,
    NotFoundError,
)
from drive.apps.files.middleware import ApiErrorMiddleware


@pytest.fixture
def middleware():
    """Middleware wrapping a no-op view.

    Returns:
        ApiErrorMiddleware instance.
    """
    return ApiErrorMiddleware(lambda request: HttpResponse('ok'))


def _body(response):
    return json.loads(response.content)


@pytest.mark.parametrize(('exception', 'status', 'error_type'), [
    (NotFoundError(), 404, 'NotFound'),
    (InvalidIdentifierError(), 400, 'Validation'),
    (ConflictError(), 409, 'Conflict'),
])
def test_drive_errors_keep_their_type(middleware, exception, status, error_type):
    """Each error category maps to its HTTP status."""
    request = RequestFactory().get('/api/files')

    response = middleware.process_exception(request, exception)

    assert response.status_code == status
    assert _body(response)['error'] == {
        'code': exception.code,
        'message': exception.message,
        'type': error_type,
    }


def test_unexpected_error_hides_details(middleware):
    """Unknown exceptions become a generic 500 envelope."""
    request = RequestFactory().get('/api/files')

    response = middleware.process_exception(request, RuntimeError('secret'))

    assert response.status_code == 500
    body = _body(response)
    assert body['success'] is False
    assert body['error']['code'] == 'General.UnexpectedError'
    assert body['error']['type'] == 'Unexpected'
    assert 'secret' not in response.content.decode()


def test_non_api_paths_untouched(middleware):
    """Errors outside the API are left to Django."""
    request = RequestFactory().get('/admin/')

    assert middleware.process_exception(request, NotFoundError()) is None


def test_passes_responses_through(middleware):
    """Normal responses are not altered."""
    response = middleware(RequestFactory().get('/api/files'))

    assert response.content == b'ok'
