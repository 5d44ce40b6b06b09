"""
Core Layer - Classifier tables, ignore filter, directory scanning, and configuration.
"""

from repolens.core.classifier import (
    ClassifierRegistry,
    extension_to_language,
    get_default_registry,
    is_binary,
    is_config_filename,
    is_dependency_filename,
    is_source_code,
    is_text,
)
from repolens.core.config import (
    LoggingConfig,
    RepolensConfig,
    ScannerSettings,
    load_config,
)
from repolens.core.errors import (
    PathNotFoundError,
    RepolensError,
    ScanCancelledError,
    ScanError,
)
from repolens.core.file_scanner import (
    CancellationToken,
    DirectoryScanner,
    DirectoryScannerInterface,
    EntryKind,
    FileInfo,
    ScanConfig,
    ScanResult,
    scan_directory,
)
from repolens.core.ignore_filter import (
    DEFAULT_IGNORE_PATTERNS,
    FilterConfig,
    FilterConfigBuilder,
    IgnoreFilter,
)

__all__ = [
    # Config
    "RepolensConfig",
    "ScannerSettings",
    "LoggingConfig",
    "load_config",
    # Errors
    "RepolensError",
    "ScanError",
    "PathNotFoundError",
    "ScanCancelledError",
    # Classifier
    "ClassifierRegistry",
    "get_default_registry",
    "is_binary",
    "is_text",
    "is_source_code",
    "is_config_filename",
    "is_dependency_filename",
    "extension_to_language",
    # Ignore filter
    "DEFAULT_IGNORE_PATTERNS",
    "FilterConfig",
    "FilterConfigBuilder",
    "IgnoreFilter",
    # Directory scanner
    "DirectoryScanner",
    "DirectoryScannerInterface",
    "scan_directory",
    "CancellationToken",
    "EntryKind",
    "FileInfo",
    "ScanConfig",
    "ScanResult",
]
