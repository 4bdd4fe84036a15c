"""
This file contains all the settings that defines the development server.

SECURITY WARNING: don't run with debug turned on in production!
"""

from typing import Final

from drive.settings.components.common import SECRET_KEY

DEBUG = True

ALLOWED_HOSTS: Final = [
    'localhost',
    '0.0.0.0',  # noqa: S104
    '127.0.0.1',
    '[::1]',
]

if not SECRET_KEY:
    SECRET_KEY = 'django-insecure-development-only'  # noqa: S105
