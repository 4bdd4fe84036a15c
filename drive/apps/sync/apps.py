"""Django app configuration for sync app."""

from django.apps import AppConfig


class SyncConfig(AppConfig):
    """Configuration for the folder sync client."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'drive.apps.sync'
    verbose_name = 'Folder sync'
