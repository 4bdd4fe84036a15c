"""Directory scan feeding the sync plan.

Only top-level regular files are looked at; symbolic links are skipped
rather than followed. Each file is checked against the same upload rules
the server applies and hashed with the same algorithm, so that local and
server hashes compare like with like.
"""

import logging
import unicodedata
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, final

from drive.apps.files.exceptions import FileValidationError
from drive.apps.files.infrastructure.metadata import calculate_checksum
from drive.apps.files.logic.validation import UploadRules, validate_upload
from drive.apps.sync.exceptions import FolderScanError, LocalFileMissingError
from drive.apps.sync.structures import LocalFileDescriptor, SkippedFile

logger = logging.getLogger(__name__)


def normalize_name(name: str) -> str:
    """Bring a filename to Unicode NFC form.

    Different filesystems hand out composed or decomposed forms of the
    same visible name; comparisons only work on one of them.
    """
    return unicodedata.normalize('NFC', name)


@final
@dataclass(slots=True)
class FolderScan:
    """Result of scanning one selected folder.

    Keeps the side table from normalized name to path that execution
    uses to reach the bytes behind a ``LocalFileDescriptor``.
    """

    root: Path
    files: list[LocalFileDescriptor] = field(default_factory=list)
    skipped: list[SkippedFile] = field(default_factory=list)
    total_entries: int = 0
    _paths: dict[str, Path] = field(default_factory=dict, repr=False)

    def add(self, descriptor: LocalFileDescriptor, path: Path) -> None:
        """Register a scanned file and its path."""
        self.files.append(descriptor)
        self._paths[descriptor.name] = path

    def path_for(self, name: str) -> Path | None:
        """Look up the path of a scanned file by name."""
        return self._paths.get(normalize_name(name))

    def open(self, name: str) -> IO[bytes]:
        """Open a scanned file for reading.

        Args:
            name: Name as it appears in the scan.

        Returns:
            Binary file object; the caller closes it.

        Raises:
            LocalFileMissingError: If the name is unknown or the file
                can no longer be opened.
        """
        path = self.path_for(name)
        if path is None:
            raise LocalFileMissingError(f'File {name} was not part of the scan.')
        try:
            return path.open('rb')
        except OSError as exc:
            raise LocalFileMissingError(f'File {name} cannot be read: {exc}') from exc


def scan_directory(root: Path | str, rules: UploadRules | None = None) -> FolderScan:
    """Enumerate, validate and hash the top-level files of a folder.

    Args:
        root: Folder to scan.
        rules: Upload rules, read from settings if omitted.

    Returns:
        FolderScan with accepted files and skipped entries.

    Raises:
        FolderScanError: If the folder does not exist or cannot be listed.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise FolderScanError(f'{root_path} is not a directory.')

    try:
        entries = sorted(root_path.iterdir())
    except OSError as exc:
        raise FolderScanError(f'Cannot list {root_path}: {exc}') from exc

    scan = FolderScan(root=root_path)
    for entry in entries:
        if entry.is_symlink():
            logger.info('Skipping symbolic link %s', entry.name)
            scan.skipped.append(SkippedFile(normalize_name(entry.name), 'Symbolic link.'))
            continue
        if not entry.is_file():
            continue
        scan.total_entries += 1
        name = normalize_name(entry.name)

        if scan.path_for(name) is not None:
            scan.skipped.append(SkippedFile(name, 'Duplicate name after normalization.'))
            continue

        try:
            size = entry.stat().st_size
            validate_upload(name, size, rules)
            with entry.open('rb') as file_obj:
                content_hash = calculate_checksum(file_obj)
        except FileValidationError as exc:
            logger.info('Skipping %s: %s', name, exc.message)
            scan.skipped.append(SkippedFile(name, exc.message))
            continue
        except OSError as exc:
            logger.warning('Skipping unreadable file %s: %s', name, exc)
            scan.skipped.append(SkippedFile(name, f'Cannot read file: {exc}'))
            continue

        scan.add(LocalFileDescriptor(name=name, size=size, hash=content_hash), entry)

    logger.info(
        'Scanned %s: %d files accepted, %d skipped',
        root_path,
        len(scan.files),
        len(scan.skipped),
    )
    return scan
