"""
Data models for the file scanner module.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Iterable

from repolens.core.ignore_filter import DEFAULT_IGNORE_PATTERNS, FilterConfig


class EntryKind(Enum):
    """Kind of a filesystem entry as seen by the scanner (links not followed)."""

    FILE = "file"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    OTHER = "other"


@dataclass(frozen=True)
class FileInfo:
    """
    Metadata for one scanned entry.

    Attributes:
        path: Rendered path of the entry (root path joined with relative parts)
        name: Final path component
        size: Size in bytes as reported by stat
        is_dir: True for directories
        extension: Text after the last dot of the name, without the dot, or ''
        modified_time: Modification time (Unix epoch seconds, 0 if unavailable)
        created_time: Creation time (Unix epoch seconds, 0 if unavailable)
    """

    path: str
    name: str
    size: int
    is_dir: bool
    extension: str
    modified_time: int = 0
    created_time: int = 0


@dataclass(frozen=True)
class ScanConfig:
    """
    Configuration for a single scan.

    Attributes:
        path: Root directory to scan
        max_depth: Maximum depth to descend (root is depth 0), None for unbounded
        ignore_patterns: Substrings matched against entry names and paths
        parallel: Use the thread-pool traversal instead of the sequential one
        follow_links: Descend into symlinked directories
        max_workers: Worker threads for parallel mode (None = executor default)
        respect_gitignore: Also apply patterns from the root .gitignore
        case_sensitive: Case-sensitive ignore pattern matching
        match_segments: Ignore patterns must equal a whole path segment
        filter_config: Optional size/extension rules applied to files
    """

    path: str = "."
    max_depth: int | None = None
    ignore_patterns: tuple[str, ...] = DEFAULT_IGNORE_PATTERNS
    parallel: bool = True
    follow_links: bool = False
    max_workers: int | None = None
    respect_gitignore: bool = False
    case_sensitive: bool = True
    match_segments: bool = False
    filter_config: FilterConfig | None = None

    def __post_init__(self) -> None:
        # Accept any iterable of patterns but store a tuple
        if not isinstance(self.ignore_patterns, tuple):
            object.__setattr__(self, "ignore_patterns", tuple(self.ignore_patterns))
        if self.max_depth is not None and self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")


@dataclass(frozen=True)
class ScanResult:
    """
    Immutable snapshot produced by one scan.

    Use ScanResult.from_entries to build one; the aggregates are derived from
    the entry list so file_count + dir_count == len(files) and total_size is
    the sum of non-directory sizes.
    """

    files: tuple[FileInfo, ...] = field(default_factory=tuple)
    file_count: int = 0
    dir_count: int = 0
    total_size: int = 0
    duration_ms: int = 0

    @classmethod
    def from_entries(cls, entries: Iterable[FileInfo], duration_ms: int = 0) -> "ScanResult":
        files = tuple(entries)
        file_count = 0
        dir_count = 0
        total_size = 0
        for entry in files:
            if entry.is_dir:
                dir_count += 1
            else:
                file_count += 1
                total_size += entry.size
        return cls(
            files=files,
            file_count=file_count,
            dir_count=dir_count,
            total_size=total_size,
            duration_ms=duration_ms,
        )

    def to_dict(self) -> dict:
        """Convert the result to a JSON-friendly dictionary."""
        return {
            "files": [asdict(f) for f in self.files],
            "file_count": self.file_count,
            "dir_count": self.dir_count,
            "total_size": self.total_size,
            "duration_ms": self.duration_ms,
        }
