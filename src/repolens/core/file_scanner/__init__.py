"""
DirectoryScanner module for repolens.

Provides recursive directory traversal with ignore patterns, depth limits,
symlink handling and sequential or parallel execution.
"""

from .cancellation import CancellationToken
from .interfaces import DirectoryScannerInterface
from .models import EntryKind, FileInfo, ScanConfig, ScanResult
from .scanner import DirectoryScanner, scan_directory

__all__ = [
    # Main classes
    "DirectoryScanner",
    "DirectoryScannerInterface",
    "scan_directory",
    # Models
    "EntryKind",
    "FileInfo",
    "ScanConfig",
    "ScanResult",
    # Cancellation
    "CancellationToken",
]
