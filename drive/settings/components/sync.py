"""Folder sync client settings."""

from drive.settings.components import config

SYNC_API_URL = config('SYNC_API_URL', default='http://localhost:8000')
SYNC_API_TOKEN = config('SYNC_API_TOKEN', default='')

# Seconds before a single HTTP request is abandoned
SYNC_HTTP_TIMEOUT = config('SYNC_HTTP_TIMEOUT', cast=float, default=30)
