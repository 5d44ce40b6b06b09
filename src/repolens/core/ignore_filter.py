"""
Ignore filter for deciding which scanned entries are excluded.

The filter is configured through an immutable FilterConfig, usually built with
the fluent FilterConfigBuilder:

    >>> config = FilterConfig.builder().min_size(100).max_size(10_000).build()
    >>> IgnoreFilter(config).should_exclude("src/main.rs", 500)
    False
"""

import os
import re
from dataclasses import dataclass, field, replace
from typing import Iterable

# Default ignore patterns, matched as substrings of the root-relative path
DEFAULT_IGNORE_PATTERNS: tuple[str, ...] = (
    # Dependency directories
    "node_modules",
    "bower_components",
    "vendor",
    "packages",
    # Build output
    "target",
    "build",
    "dist",
    "out",
    ".next",
    ".nuxt",
    # Version control
    ".git",
    ".svn",
    ".hg",
    # IDE
    ".idea",
    ".vscode",
    ".vs",
    # Temp and cache
    "tmp",
    "temp",
    ".cache",
    # OS housekeeping
    ".DS_Store",
    "Thumbs.db",
    "desktop.ini",
)

_SEPARATORS = re.compile(r"[\\/]")


def file_extension(name: str) -> str:
    """
    Return the text after the last dot of a file name, without the dot.

    Dotfiles without another dot ('.gitignore') have no extension.
    """
    return os.path.splitext(name)[1][1:]


def matches_ignore_pattern(
    text: str,
    patterns: Iterable[str],
    *,
    case_sensitive: bool = True,
    match_segments: bool = False,
) -> bool:
    """
    Check whether any pattern matches a name or rendered path.

    Args:
        text: Entry name or root-relative path
        patterns: Ignore patterns
        case_sensitive: Compare without case folding when True
        match_segments: Require a pattern to equal a whole path segment
                        instead of appearing anywhere as a substring

    Returns:
        True if at least one pattern matches
    """
    if not case_sensitive:
        text = text.casefold()

    if match_segments:
        segments = set(_SEPARATORS.split(text))
        for pattern in patterns:
            if not pattern:
                continue
            if (pattern if case_sensitive else pattern.casefold()) in segments:
                return True
        return False

    for pattern in patterns:
        if not pattern:
            continue
        if (pattern if case_sensitive else pattern.casefold()) in text:
            return True
    return False


@dataclass(frozen=True)
class FilterConfig:
    """
    Immutable configuration for IgnoreFilter.

    Attributes:
        ignore_patterns: Substrings that exclude an entry when found in its path
        min_size: Entries smaller than this many bytes are excluded
        max_size: Entries larger than this many bytes are excluded
        extensions: If set, only entries with one of these extensions survive
        case_sensitive: Whether pattern and extension comparison is case-sensitive
        match_segments: Match patterns against whole path segments only
    """

    ignore_patterns: tuple[str, ...] = DEFAULT_IGNORE_PATTERNS
    min_size: int | None = None
    max_size: int | None = None
    extensions: frozenset[str] | None = None
    case_sensitive: bool = True
    match_segments: bool = False

    @staticmethod
    def builder() -> "FilterConfigBuilder":
        """Start a builder seeded with the default patterns."""
        return FilterConfigBuilder()


@dataclass
class FilterConfigBuilder:
    """Fluent builder producing a FilterConfig value."""

    _patterns: list[str] = field(default_factory=lambda: list(DEFAULT_IGNORE_PATTERNS))
    _min_size: int | None = None
    _max_size: int | None = None
    _extensions: set[str] | None = None
    _case_sensitive: bool = True
    _match_segments: bool = False

    def add_pattern(self, pattern: str) -> "FilterConfigBuilder":
        self._patterns.append(pattern)
        return self

    def patterns(self, patterns: Iterable[str]) -> "FilterConfigBuilder":
        """Replace the pattern list (use an empty list to disable patterns)."""
        self._patterns = list(patterns)
        return self

    def min_size(self, size: int) -> "FilterConfigBuilder":
        self._min_size = size
        return self

    def max_size(self, size: int) -> "FilterConfigBuilder":
        self._max_size = size
        return self

    def extensions(self, extensions: Iterable[str]) -> "FilterConfigBuilder":
        """Restrict to these extensions, written with or without the dot."""
        self._extensions = {ext.lstrip(".") for ext in extensions}
        return self

    def case_sensitive(self, enabled: bool = True) -> "FilterConfigBuilder":
        self._case_sensitive = enabled
        return self

    def match_segments(self, enabled: bool = True) -> "FilterConfigBuilder":
        self._match_segments = enabled
        return self

    def build(self) -> FilterConfig:
        """Produce the immutable configuration."""
        if (
            self._min_size is not None
            and self._max_size is not None
            and self._min_size > self._max_size
        ):
            raise ValueError(
                f"min_size ({self._min_size}) must not exceed max_size ({self._max_size})"
            )
        return FilterConfig(
            ignore_patterns=tuple(self._patterns),
            min_size=self._min_size,
            max_size=self._max_size,
            extensions=frozenset(self._extensions) if self._extensions is not None else None,
            case_sensitive=self._case_sensitive,
            match_segments=self._match_segments,
        )


class IgnoreFilter:
    """
    Decides per entry whether it is excluded from scan results.

    Rules are evaluated in order and the first rule that fires excludes the
    entry: minimum size, maximum size, extension allow-list, ignore patterns.
    The filter only reads its configuration and can be shared between
    scanner worker threads.
    """

    def __init__(self, config: FilterConfig | None = None):
        self._config = config or FilterConfig()
        if self._config.extensions is not None and not self._config.case_sensitive:
            self._allowed = frozenset(ext.casefold() for ext in self._config.extensions)
        else:
            self._allowed = self._config.extensions

    @property
    def config(self) -> FilterConfig:
        return self._config

    def with_patterns(self, patterns: Iterable[str]) -> "IgnoreFilter":
        """Return a new filter with the same rules but different patterns."""
        return IgnoreFilter(replace(self._config, ignore_patterns=tuple(patterns)))

    def should_exclude(self, path: str | os.PathLike[str], size: int) -> bool:
        """
        Check whether an entry should be excluded.

        Args:
            path: Entry path, rendered with platform separators
            size: Entry size in bytes

        Returns:
            True if the entry is excluded
        """
        config = self._config

        if config.min_size is not None and size < config.min_size:
            return True

        if config.max_size is not None and size > config.max_size:
            return True

        rendered = os.fspath(path)

        if self._allowed is not None:
            ext = file_extension(os.path.basename(rendered))
            if not ext:
                return True
            if not config.case_sensitive:
                ext = ext.casefold()
            if ext not in self._allowed:
                return True

        return matches_ignore_pattern(
            rendered,
            config.ignore_patterns,
            case_sensitive=config.case_sensitive,
            match_segments=config.match_segments,
        )
