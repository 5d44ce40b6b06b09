"""Exception types for repolens."""


class RepolensError(Exception):
    """Base exception for repolens errors."""

    pass


class ScanError(RepolensError):
    """Error that aborts a whole scan."""

    pass


class PathNotFoundError(ScanError):
    """Raised when the scan root does not exist.

    Raised before any traversal happens, so a caller never receives a
    partial result for a missing root.
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Path does not exist: {path}")


class ScanCancelledError(ScanError):
    """Raised when a scan is stopped through its cancellation token."""

    def __init__(self, path: str, entries_seen: int = 0):
        self.path = path
        self.entries_seen = entries_seen
        super().__init__(f"Scan of {path} was cancelled after {entries_seen} entries")
