"""
Abstract interfaces for directory scanning operations.
"""

from abc import ABC, abstractmethod

from .cancellation import CancellationToken
from .models import ScanConfig, ScanResult


class DirectoryScannerInterface(ABC):
    """
    Abstract interface for directory scanning operations.

    Implementations walk a directory tree, drop entries matching the
    configured ignore rules and return a ScanResult snapshot.
    """

    @abstractmethod
    def scan(
        self, config: ScanConfig, cancellation: CancellationToken | None = None
    ) -> ScanResult:
        """
        Scan the tree rooted at config.path.

        Args:
            config: Scan configuration
            cancellation: Optional token checked between traversal steps

        Returns:
            ScanResult with every surviving entry and its aggregates

        Raises:
            PathNotFoundError: If the root path does not exist
            ScanCancelledError: If the token was cancelled during the scan

        Notes:
            - Entries whose metadata cannot be read are dropped
            - Sequential and parallel modes report the same aggregates
        """
        pass
