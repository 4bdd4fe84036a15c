"""One-way folder synchronization: local folder to server.

The plan only ever uploads or replaces. Files that exist on the server
but not locally are left alone.
"""

import logging
from collections import defaultdict
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Final

from drive.apps.files.logic.validation import UploadRules
from drive.apps.sync.client import SyncTransport
from drive.apps.sync.exceptions import SyncError
from drive.apps.sync.scanner import FolderScan, normalize_name, scan_directory
from drive.apps.sync.structures import (
    FolderSyncReport,
    LocalFileDescriptor,
    RemoteFile,
    SyncAction,
    SyncActionType,
    SyncItemResult,
    SyncOutcome,
    SyncPlan,
    SyncResult,
    SyncSummary,
)

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[SyncSummary], bool]

REASON_NEW: Final = 'New file'
REASON_CHANGED: Final = 'File changed'


def build_sync_plan(
    local_files: Iterable[LocalFileDescriptor],
    remote_files: Iterable[RemoteFile],
) -> SyncPlan:
    """Diff local files against server files by name and content hash.

    For each local file: a same-name server file with the same hash means
    nothing to do; otherwise the first same-name server file with another
    hash is replaced; with no same-name server file the file is uploaded.

    Args:
        local_files: Scanned local files.
        remote_files: Files currently on the server.

    Returns:
        Plan with actions in local file order and its summary.
    """
    remote_by_name: dict[str, list[RemoteFile]] = defaultdict(list)
    for remote in remote_files:
        remote_by_name[normalize_name(remote.original_name)].append(remote)

    local_list = list(local_files)
    actions: list[SyncAction] = []
    for local in local_list:
        name = normalize_name(local.name)
        candidates = remote_by_name.get(name, [])

        if any(remote.content_hash == local.hash for remote in candidates):
            continue

        if candidates:
            # Every candidate differs here, so the first one is the target
            target = candidates[0]
            actions.append(SyncAction(
                type=SyncActionType.REPLACE,
                file_name=name,
                local_file=local,
                reason=REASON_CHANGED,
                server_file_id=target.id,
            ))
        else:
            actions.append(SyncAction(
                type=SyncActionType.UPLOAD,
                file_name=name,
                local_file=local,
                reason=REASON_NEW,
            ))

    new_files = sum(1 for action in actions if action.type == SyncActionType.UPLOAD)
    replaced_files = len(actions) - new_files
    summary = SyncSummary(
        total_local_files=len(local_list),
        new_files=new_files,
        replaced_files=replaced_files,
        unchanged_files=len(local_list) - new_files - replaced_files,
    )
    return SyncPlan(actions=tuple(actions), summary=summary)


def _upload_from_scan(
    action: SyncAction,
    scan: FolderScan,
    transport: SyncTransport,
) -> None:
    with scan.open(action.file_name) as content:
        transport.upload_file(action.file_name, content)


def _execute_upload(
    action: SyncAction,
    scan: FolderScan,
    transport: SyncTransport,
) -> SyncItemResult:
    try:
        _upload_from_scan(action, scan, transport)
    except SyncError as exc:
        logger.warning('Upload of %s failed: %s', action.file_name, exc)
        return SyncItemResult(
            action.file_name,
            SyncOutcome.UPLOAD_FAILED,
            success=False,
            error=str(exc),
        )
    return SyncItemResult(action.file_name, SyncOutcome.UPLOADED, success=True)


def _execute_replace(
    action: SyncAction,
    scan: FolderScan,
    transport: SyncTransport,
) -> SyncItemResult:
    if action.server_file_id is None:
        return SyncItemResult(
            action.file_name,
            SyncOutcome.ERROR,
            success=False,
            error='Replace action has no target file id.',
        )

    # The local bytes must be reachable before the server copy goes away
    try:
        content = scan.open(action.file_name)
    except SyncError as exc:
        logger.warning('Replace of %s skipped: %s', action.file_name, exc)
        return SyncItemResult(
            action.file_name,
            SyncOutcome.ERROR,
            success=False,
            error=str(exc),
        )

    with content:
        try:
            transport.delete_file(action.server_file_id)
        except SyncError as exc:
            logger.warning(
                'Delete before replace of %s failed: %s',
                action.file_name,
                exc,
            )
            return SyncItemResult(
                action.file_name,
                SyncOutcome.REPLACE_DELETE_FAILED,
                success=False,
                error=str(exc),
            )

        try:
            transport.upload_file(action.file_name, content)
        except SyncError as exc:
            # The server copy is already gone at this point
            logger.error(
                'Upload after delete of %s failed, server copy lost: %s',
                action.file_name,
                exc,
            )
            return SyncItemResult(
                action.file_name,
                SyncOutcome.REPLACE_UPLOAD_FAILED,
                success=False,
                error=str(exc),
            )
    return SyncItemResult(action.file_name, SyncOutcome.REPLACED, success=True)


def execute_sync_plan(
    plan: SyncPlan,
    scan: FolderScan,
    transport: SyncTransport,
    confirm: ConfirmCallback | None = None,
) -> SyncResult:
    """Ask for confirmation, then run the plan's actions one by one.

    A failing action is recorded and the next one still runs. Declining
    the confirmation is a normal outcome with nothing processed.

    Args:
        plan: Plan built by ``build_sync_plan``.
        scan: Scan the plan was built from, used to reach file bytes.
        transport: Files API transport.
        confirm: Receives the summary, returns False to cancel. Omit to
            run without asking.

    Returns:
        Aggregate result with one entry per executed action.
    """
    result = SyncResult(total=len(plan.actions))
    if plan.is_empty:
        return result

    if confirm is not None and not confirm(plan.summary):
        logger.info('Sync cancelled by user, %d actions skipped', result.total)
        result.cancelled = True
        return result

    for action in plan.actions:
        try:
            if action.type == SyncActionType.REPLACE:
                item = _execute_replace(action, scan, transport)
            else:
                item = _execute_upload(action, scan, transport)
        except OSError as exc:
            logger.warning('Action on %s failed: %s', action.file_name, exc)
            item = SyncItemResult(
                action.file_name,
                SyncOutcome.ERROR,
                success=False,
                error=str(exc),
            )
        result.record(item)

    logger.info(
        'Sync finished: %d succeeded, %d failed',
        result.success_count,
        result.error_count,
    )
    return result


def synchronize_folder(
    root: Path | str,
    transport: SyncTransport,
    confirm: ConfirmCallback | None = None,
    rules: UploadRules | None = None,
) -> FolderSyncReport:
    """Scan a folder, diff it against the server and execute the plan.

    Args:
        root: Folder to synchronize.
        transport: Files API transport.
        confirm: Confirmation callback, see ``execute_sync_plan``.
        rules: Upload rules, read from settings if omitted.

    Returns:
        Plan summary, execution result and skipped local entries.

    Raises:
        FolderScanError: If the folder cannot be read.
        SyncTransportError: If the server listing cannot be fetched.
    """
    scan = scan_directory(root, rules)
    remote_files = transport.list_files()
    plan = build_sync_plan(scan.files, remote_files)
    result = execute_sync_plan(plan, scan, transport, confirm)
    return FolderSyncReport(
        summary=plan.summary,
        result=result,
        skipped=tuple(scan.skipped),
    )
