"""
repolens - fast, approximate insight into an unknown code repository.

Walks a directory tree without reading file contents and characterizes it:
dominant ecosystem, per-language breakdown, manifests present and an
estimate of lines of code.

    >>> from repolens import ScanConfig, analyze, scan
    >>> result = scan(ScanConfig(path="."))
    >>> analysis = analyze(result.files)
"""

from typing import Iterable

from repolens.core import (
    DEFAULT_IGNORE_PATTERNS,
    CancellationToken,
    ClassifierRegistry,
    FileInfo,
    FilterConfig,
    IgnoreFilter,
    PathNotFoundError,
    RepolensError,
    ScanCancelledError,
    ScanConfig,
    ScanError,
    ScanResult,
    scan_directory,
)
from repolens.services import LanguageStat, ProjectAnalysis, ProjectAnalyzer

__version__ = "0.1.0"


def scan(
    config: ScanConfig | None = None, *, cancellation: CancellationToken | None = None
) -> ScanResult:
    """
    Scan a directory tree.

    Args:
        config: Scan configuration (defaults scan the current directory)
        cancellation: Optional token to stop the scan early

    Returns:
        ScanResult snapshot

    Raises:
        PathNotFoundError: If the root path does not exist
        ScanCancelledError: If the scan was cancelled
    """
    return scan_directory(config, cancellation)


def analyze(files: Iterable[FileInfo]) -> ProjectAnalysis:
    """Analyze a scanned file list. Never raises."""
    return ProjectAnalyzer().analyze(files)


def scan_and_analyze(
    config: ScanConfig | None = None, *, cancellation: CancellationToken | None = None
) -> tuple[ScanResult, ProjectAnalysis]:
    """Scan a tree and analyze the result in one call."""
    result = scan(config, cancellation=cancellation)
    return result, analyze(result.files)


__all__ = [
    "__version__",
    # Entry points
    "scan",
    "analyze",
    "scan_and_analyze",
    # Models
    "ScanConfig",
    "ScanResult",
    "FileInfo",
    "LanguageStat",
    "ProjectAnalysis",
    # Components
    "ClassifierRegistry",
    "FilterConfig",
    "IgnoreFilter",
    "ProjectAnalyzer",
    "CancellationToken",
    "DEFAULT_IGNORE_PATTERNS",
    # Errors
    "RepolensError",
    "ScanError",
    "PathNotFoundError",
    "ScanCancelledError",
]
