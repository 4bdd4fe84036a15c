"""Management command to clean up blobs that have no file record."""

import logging
from datetime import timedelta
from typing import Any, Final

from django.core.management.base import BaseCommand
from django.utils import timezone

from drive.apps.files.exceptions import StorageError
from drive.apps.files.infrastructure.blobs import get_blob_store
from drive.apps.files.models import FileRecord

_DEFAULT_BATCH_SIZE: Final = 1000
_DEFAULT_MIN_AGE_MINUTES: Final = 60

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """Delete blobs whose record is gone.

    Such blobs are left behind when a rollback after a failed commit
    could not delete them. Uploads write the blob before committing the
    record, so blobs younger than ``--min-age`` are never touched.
    """

    help = 'Delete stored blobs that have no matching file record'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without deleting',
        )
        parser.add_argument(
            '--batch-size',
            type=int,
            default=_DEFAULT_BATCH_SIZE,
            help=f'Max blobs to process (default: {_DEFAULT_BATCH_SIZE})',
        )
        parser.add_argument(
            '--min-age',
            type=int,
            default=_DEFAULT_MIN_AGE_MINUTES,
            help=(
                'Skip blobs written less than this many minutes ago '
                f'(default: {_DEFAULT_MIN_AGE_MINUTES})'
            ),
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the cleanup command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        dry_run = options['dry_run']
        batch_size = options['batch_size']
        min_age = options['min_age']

        cutoff = timezone.now() - timedelta(minutes=min_age)

        self.stdout.write(
            f'Looking for orphaned blobs written before {cutoff} '
            f'(older than {min_age} minutes)',
        )

        blobs = get_blob_store()
        records = FileRecord.objects.only('id', 'owner_id', 'original_name')
        known = {
            f'{record.owner_id}/{record.get_stored_name()}'
            for record in records
        }

        count = 0
        failed = 0

        for namespace in blobs.list_namespaces():
            for stored_name in blobs.list_blobs(namespace):
                if count + failed >= batch_size:
                    break
                path = f'{namespace}/{stored_name}'
                if path in known:
                    continue

                try:
                    modified_at = blobs.modified_time(namespace, stored_name)
                except StorageError as exc:
                    self.stderr.write(f'Failed to check {path}: {exc}')
                    failed += 1
                    continue
                if modified_at is None or modified_at > cutoff:
                    continue

                if dry_run:
                    self.stdout.write(f'Would delete: {path}')
                    count += 1
                    continue

                try:
                    blobs.delete(namespace, stored_name)
                except StorageError as exc:
                    self.stderr.write(f'Failed to delete {path}: {exc}')
                    failed += 1
                    continue
                logger.info('Deleted orphaned blob: %s', path)
                count += 1

            if not dry_run:
                blobs.remove_namespace_if_empty(namespace)

        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'Would delete {count} orphaned blobs'),
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(
                    f'Deleted {count} orphaned blobs, {failed} failed',
                ),
            )
