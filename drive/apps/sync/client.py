"""HTTP transport used by the sync client to talk to the files API."""

import logging
import mimetypes
from typing import IO, Any, Final, Protocol, final

import requests
from django.conf import settings

from drive.apps.sync.exceptions import SyncTransportError
from drive.apps.sync.structures import RemoteFile

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT: Final = 30.0
_FILES_PATH: Final = '/api/files'


class SyncTransport(Protocol):
    """Operations the reconciler needs from the server."""

    def list_files(self) -> list[RemoteFile]:
        """List all files of the authenticated user."""

    def upload_file(self, name: str, content: IO[bytes]) -> RemoteFile:
        """Upload content as a new file."""

    def delete_file(self, file_id: str) -> None:
        """Delete one file by id."""


def get_sync_timeout() -> float:
    """Get HTTP timeout in seconds for sync requests.

    Returns:
        Timeout from settings or default of 30 seconds.
    """
    return float(getattr(settings, 'SYNC_HTTP_TIMEOUT', _DEFAULT_TIMEOUT))


def _parse_remote_file(payload: Any) -> RemoteFile:
    try:
        return RemoteFile.from_payload(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise SyncTransportError(f'Malformed file in response: {payload!r}') from exc


@final
class FilesApiClient:
    """Files API client over ``requests``.

    Every failure (connection, timeout, non-JSON answer, error envelope)
    is raised as ``SyncTransportError``.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize FilesApiClient.

        Args:
            base_url: Server root, e.g. ``'https://drive.example.com'``.
            token: Bearer token.
            timeout: Per-request timeout in seconds.
            session: Session to reuse, a new one if omitted.
        """
        self._base_url = base_url.rstrip('/')
        self._timeout = get_sync_timeout() if timeout is None else timeout
        self._session = session or requests.Session()
        self._session.headers['Authorization'] = f'Bearer {token}'

    def close(self) -> None:
        """Release pooled connections."""
        self._session.close()

    def __enter__(self) -> 'FilesApiClient':
        """Use the client as a context manager."""
        return self

    def __exit__(self, *exc_info: object) -> None:
        """Close the session on exit."""
        self.close()

    def list_files(self) -> list[RemoteFile]:
        """List all files of the authenticated user.

        Returns:
            Server files, newest first.

        Raises:
            SyncTransportError: If the request failed or the answer
                is not a file list.
        """
        data = self._request('GET', _FILES_PATH)
        if data is None:
            return []
        if not isinstance(data, list):
            raise SyncTransportError('Unexpected file list in response.')
        return [_parse_remote_file(item) for item in data]

    def upload_file(self, name: str, content: IO[bytes]) -> RemoteFile:
        """Upload content as a new file.

        Args:
            name: Filename to store.
            content: Binary stream, read from its current position.

        Returns:
            The created server file.

        Raises:
            SyncTransportError: If the request failed or the answer
                is not a file.
        """
        content_type = mimetypes.guess_type(name)[0] or 'application/octet-stream'
        data = self._request(
            'POST',
            f'{_FILES_PATH}/upload',
            files={'file': (name, content, content_type)},
        )
        return _parse_remote_file(data)

    def delete_file(self, file_id: str) -> None:
        """Delete one file by id.

        Raises:
            SyncTransportError: If the request failed.
        """
        self._request('DELETE', f'{_FILES_PATH}/{file_id}')

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f'{self._base_url}{path}'
        try:
            response = self._session.request(
                method,
                url,
                timeout=self._timeout,
                **kwargs,
            )
        except requests.Timeout as exc:
            logger.warning('%s %s timed out', method, url)
            raise SyncTransportError(f'Request to {url} timed out.') from exc
        except requests.RequestException as exc:
            logger.warning('%s %s failed: %s', method, url, exc)
            raise SyncTransportError(f'Request to {url} failed: {exc}') from exc

        try:
            envelope = response.json()
        except requests.JSONDecodeError as exc:
            raise SyncTransportError(
                f'Unexpected response from {url} (HTTP {response.status_code}).',
                status_code=response.status_code,
            ) from exc

        if not isinstance(envelope, dict) or not envelope.get('success'):
            error = envelope.get('error') if isinstance(envelope, dict) else None
            error = error if isinstance(error, dict) else {}
            raise SyncTransportError(
                error.get('message') or f'HTTP {response.status_code}',
                code=error.get('code'),
                status_code=response.status_code,
            )
        return envelope.get('data')
