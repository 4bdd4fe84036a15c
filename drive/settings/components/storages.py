"""Django storage configuration for file blobs.

``DJANGO_FILE_STORAGE`` picks the backend for user files:
- ``local``: filesystem under ``FILE_STORAGE_ROOT`` (default)
- ``s3``: any S3-compatible service (AWS, MinIO, Cloudflare R2)

Both store blobs as ``{owner_id}/{file_id}{extension}``.
"""

from typing import Any, Final

from drive.settings.components import BASE_DIR, config

_FILE_STORAGE: Final = config('DJANGO_FILE_STORAGE', default='local')

FILE_STORAGE_ROOT = config(
    'FILE_STORAGE_ROOT',
    default=str(BASE_DIR.joinpath('storage')),
)

_LOCAL_STORAGE: Final[dict[str, Any]] = {
    'BACKEND': 'drive.apps.files.infrastructure.storage.LocalFileStorage',
    'OPTIONS': {
        'location': FILE_STORAGE_ROOT,
    },
}

_S3_STORAGE: Final[dict[str, Any]] = {
    'BACKEND': 'drive.apps.files.infrastructure.storage.S3FileStorage',
    'OPTIONS': {
        'bucket_name': config('AWS_STORAGE_BUCKET_NAME', default='drive'),
        'access_key': config('AWS_ACCESS_KEY_ID', default=''),
        'secret_key': config('AWS_SECRET_ACCESS_KEY', default=''),
        'endpoint_url': config(
            'AWS_S3_ENDPOINT_URL',
            default=None,
        ),
        'region_name': config(
            'AWS_S3_REGION_NAME',
            default='auto',
        ),
        'file_overwrite': True,  # Content replace overwrites in place
        'default_acl': None,  # Inherit bucket ACL
    },
}

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': _S3_STORAGE if _FILE_STORAGE == 's3' else _LOCAL_STORAGE,
    'staticfiles': {
        # Keep static files separate from user files
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
