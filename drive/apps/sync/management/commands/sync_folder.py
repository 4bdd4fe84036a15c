"""Management command to synchronize a local folder to the drive."""

import logging
from typing import Any, final, override

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from drive.apps.sync.client import FilesApiClient
from drive.apps.sync.exceptions import SyncError
from drive.apps.sync.reconciler import synchronize_folder
from drive.apps.sync.structures import SyncSummary

logger = logging.getLogger(__name__)


@final
class Command(BaseCommand):
    """Upload new and changed top-level files of a folder."""

    help = 'Synchronize the top-level files of a local folder to the drive'

    @override
    def add_arguments(self, parser: Any) -> None:
        """Add command arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument('path', help='Folder to synchronize')
        parser.add_argument(
            '--api-url',
            default=getattr(settings, 'SYNC_API_URL', ''),
            help='Server root URL (default: SYNC_API_URL)',
        )
        parser.add_argument(
            '--token',
            default=getattr(settings, 'SYNC_API_TOKEN', ''),
            help='Bearer token (default: SYNC_API_TOKEN)',
        )
        parser.add_argument(
            '--timeout',
            type=float,
            default=None,
            help='HTTP timeout in seconds (default: SYNC_HTTP_TIMEOUT)',
        )
        parser.add_argument(
            '--yes',
            action='store_true',
            help='Do not ask for confirmation',
        )

    @override
    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the command.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        if not options['api_url']:
            raise CommandError('No server URL, pass --api-url or set SYNC_API_URL.')
        if not options['token']:
            raise CommandError('No token, pass --token or set SYNC_API_TOKEN.')

        confirm = None if options['yes'] else self._confirm

        with FilesApiClient(
            options['api_url'],
            options['token'],
            timeout=options['timeout'],
        ) as client:
            try:
                report = synchronize_folder(options['path'], client, confirm)
            except SyncError as exc:
                raise CommandError(str(exc)) from exc

        for skipped in report.skipped:
            self.stdout.write(
                self.style.WARNING(f'Skipped {skipped.name}: {skipped.reason}'),
            )

        result = report.result
        if result.cancelled:
            self.stdout.write('Synchronization cancelled.')
            return
        if not result.total:
            self.stdout.write(self.style.SUCCESS('All files are already in sync.'))
            return

        for item in result.results:
            line = f'{item.action}: {item.file_name}'
            if item.success:
                self.stdout.write(line)
            else:
                self.stderr.write(f'{line} ({item.error})')

        message = (
            f'Synchronized {result.success_count} of {result.total} files, '
            f'{result.error_count} failed'
        )
        if result.error_count:
            self.stdout.write(self.style.WARNING(message))
        else:
            self.stdout.write(self.style.SUCCESS(message))

    def _confirm(self, summary: SyncSummary) -> bool:
        self.stdout.write(
            f'Local files: {summary.total_local_files}, '
            f'new: {summary.new_files}, '
            f'changed: {summary.replaced_files}, '
            f'unchanged: {summary.unchanged_files}',
        )
        answer = input('Proceed with synchronization? [y/N] ')
        return answer.strip().lower() in {'y', 'yes'}
