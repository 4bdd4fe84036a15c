"""Value types passed between scan, plan and execution."""

import enum
from dataclasses import dataclass, field
from typing import Any, final


class SyncActionType(enum.StrEnum):
    """What to do with one local file."""

    UPLOAD = 'upload'
    REPLACE = 'replace'


class SyncOutcome(enum.StrEnum):
    """What happened to one planned action."""

    UPLOADED = 'uploaded'
    UPLOAD_FAILED = 'upload_failed'
    REPLACED = 'replaced'
    REPLACE_DELETE_FAILED = 'replace_delete_failed'
    REPLACE_UPLOAD_FAILED = 'replace_upload_failed'
    ERROR = 'error'


@final
@dataclass(frozen=True, slots=True)
class LocalFileDescriptor:
    """Name, size and content hash of a scanned local file.

    Carries no access to the bytes; those are reached through the
    ``FolderScan`` that produced it.
    """

    name: str
    size: int
    hash: str


@final
@dataclass(frozen=True, slots=True)
class SkippedFile:
    """Local entry left out of the scan, with the reason."""

    name: str
    reason: str


@final
@dataclass(frozen=True, slots=True)
class RemoteFile:
    """Server file as seen by the sync client."""

    id: str
    original_name: str
    content_hash: str
    size: int = 0

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> 'RemoteFile':
        """Build from the public JSON representation of a file."""
        return cls(
            id=str(payload['id']),
            original_name=payload['originalName'],
            content_hash=payload.get('contentHash') or '',
            size=payload.get('size') or 0,
        )


@final
@dataclass(frozen=True, slots=True)
class SyncAction:
    """One transfer the plan asks for."""

    type: SyncActionType
    file_name: str
    local_file: LocalFileDescriptor
    reason: str
    server_file_id: str | None = None


@final
@dataclass(frozen=True, slots=True)
class SyncSummary:
    """Counters shown to the user before confirming a plan."""

    total_local_files: int
    new_files: int
    replaced_files: int
    unchanged_files: int


@final
@dataclass(frozen=True, slots=True)
class SyncPlan:
    """Actions and their summary."""

    actions: tuple[SyncAction, ...]
    summary: SyncSummary

    @property
    def is_empty(self) -> bool:
        """True when everything is already in sync."""
        return not self.actions


@final
@dataclass(frozen=True, slots=True)
class SyncItemResult:
    """Outcome of one executed action."""

    file_name: str
    action: SyncOutcome
    success: bool
    error: str | None = None


@final
@dataclass(slots=True)
class SyncResult:
    """Aggregate outcome of executing a plan.

    A cancelled run reports the planned total with nothing processed.
    """

    total: int
    success_count: int = 0
    error_count: int = 0
    results: list[SyncItemResult] = field(default_factory=list)
    cancelled: bool = False

    def record(self, item: SyncItemResult) -> None:
        """Add one item outcome and update the counters."""
        self.results.append(item)
        if item.success:
            self.success_count += 1
        else:
            self.error_count += 1


@final
@dataclass(frozen=True, slots=True)
class FolderSyncReport:
    """Everything a full folder synchronization produced."""

    summary: SyncSummary
    result: SyncResult
    skipped: tuple[SkippedFile, ...] = ()
