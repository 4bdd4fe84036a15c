"""Exceptions for the folder sync client."""


class SyncError(Exception):
    """Base class for sync failures."""


class FolderScanError(SyncError):
    """Raised when the selected folder cannot be read."""


class LocalFileMissingError(SyncError):
    """Raised when a planned file is no longer reachable through the scan."""


class SyncTransportError(SyncError):
    """Raised when a call to the files API did not succeed.

    Covers network failures, timeouts and error envelopes alike.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        """Initialize SyncTransportError.

        Args:
            message: Human readable message.
            code: Error code from the envelope, if the server answered.
            status_code: HTTP status, if the server answered.
        """
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)
