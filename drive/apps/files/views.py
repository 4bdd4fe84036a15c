"""API views for file operations.

All endpoints require a bearer token and answer with the JSON envelope,
except the download which streams the raw bytes.
"""

from http import HTTPStatus
from typing import Any

from django.http import FileResponse, HttpRequest, JsonResponse

from drive.apps.accounts.authentication import TokenRequiredView
from drive.apps.files.exceptions import FileValidationError
from drive.apps.files.infrastructure.uploads import ChecksumUploadHandler
from drive.apps.files.logic.file_operations import (
    delete_file,
    delete_files,
    get_file,
    get_storage_stats,
    list_files,
    open_file_content,
    serialize_record,
    update_file_text,
    upload_file,
)
from drive.apps.files.responses import parse_json_body, success_response

_UPLOAD_FIELD = 'file'


class FileListView(TokenRequiredView):
    """GET /api/files."""

    def get(self, request: HttpRequest) -> JsonResponse:
        """List owner's files, newest first."""
        records = [serialize_record(record) for record in list_files(request.user)]
        return success_response(records, message='Files retrieved.')


class FileUploadView(TokenRequiredView):
    """POST /api/files/upload (multipart, field ``file``)."""

    def setup(self, request: HttpRequest, *args: Any, **kwargs: Any) -> None:
        """Hash the multipart body while Django reads it."""
        super().setup(request, *args, **kwargs)
        request.upload_handlers.insert(0, ChecksumUploadHandler(request))

    def post(self, request: HttpRequest) -> JsonResponse:
        """Store the uploaded file."""
        uploaded = request.FILES.get(_UPLOAD_FIELD)
        if uploaded is None:
            raise FileValidationError(
                'File is empty or contains no data.',
                code='File.EmptyFile',
            )
        checksums = getattr(request, 'upload_checksums', {})
        record = upload_file(
            owner_id=request.user.pk,
            original_name=uploaded.name or '',
            content=uploaded,
            content_type=uploaded.content_type,
            content_hash=checksums.get(_UPLOAD_FIELD),
        )
        return success_response(
            serialize_record(record),
            message='File uploaded successfully.',
            status=HTTPStatus.CREATED,
        )


class FileStatsView(TokenRequiredView):
    """GET /api/files/stats."""

    def get(self, request: HttpRequest) -> JsonResponse:
        """Report number of files and total size."""
        return success_response(
            get_storage_stats(request.user),
            message='Statistics retrieved.',
        )


class FileBatchDeleteView(TokenRequiredView):
    """POST /api/files/delete-batch (``{"fileIds": [...]}``)."""

    def post(self, request: HttpRequest) -> JsonResponse:
        """Delete every listed file the user owns."""
        file_ids = parse_json_body(request).get('fileIds')
        if not isinstance(file_ids, list) or not file_ids:
            raise FileValidationError('fileIds must be a non-empty list.')
        outcome = delete_files(request.user, file_ids)
        return success_response(
            outcome,
            message='Files deleted ({count}).'.format(
                count=outcome['deletedCount'],
            ),
        )


class FileDetailView(TokenRequiredView):
    """GET, PUT and DELETE /api/files/{id}."""

    def get(self, request: HttpRequest, file_id: str) -> JsonResponse:
        """Describe one owned file."""
        return success_response(
            serialize_record(get_file(request.user, file_id)),
            message='File retrieved.',
        )

    def put(self, request: HttpRequest, file_id: str) -> JsonResponse:
        """Replace the file content with the given text."""
        content = parse_json_body(request).get('content')
        if not isinstance(content, str):
            raise FileValidationError('content must be a string.')
        record = update_file_text(request.user, file_id, content)
        return success_response(
            serialize_record(record),
            message='File content updated.',
        )

    def delete(self, request: HttpRequest, file_id: str) -> JsonResponse:
        """Delete one owned file."""
        delete_file(request.user, file_id)
        return success_response(message='File deleted.')


class FileDownloadView(TokenRequiredView):
    """GET /api/files/{id}/download."""

    def get(self, request: HttpRequest, file_id: str) -> FileResponse:
        """Stream the file bytes as an attachment."""
        record, stream = open_file_content(request.user, file_id)
        return FileResponse(
            stream,
            as_attachment=True,
            filename=record.original_name,
            content_type=record.content_type,
        )
