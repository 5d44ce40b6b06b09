"""
Project analyzer.

Derives a ProjectAnalysis from a scanned file list: project type, language
breakdown, dependency and config files, and an estimate of lines of code.
Analysis never touches the filesystem and never raises; degenerate input
yields an "Unknown" project with empty collections.
"""

import logging
from collections import Counter
from typing import Iterable, Sequence

from repolens.core.classifier import ClassifierRegistry, get_default_registry
from repolens.core.file_scanner import FileInfo

from .analysis_models import UNKNOWN_PROJECT_TYPE, LanguageStat, ProjectAnalysis

logger = logging.getLogger(__name__)

# Average number of bytes per source line used by the line estimate
AVERAGE_BYTES_PER_LINE = 40


class ProjectAnalyzer:
    """
    Stateless analyzer over a list of FileInfo entries.

    All classification goes through one ClassifierRegistry; its source
    extension table is the only one used for the line estimate.
    """

    def __init__(self, registry: ClassifierRegistry | None = None):
        self._registry = registry or get_default_registry()

    def analyze(self, files: Iterable[FileInfo]) -> ProjectAnalysis:
        """
        Analyze a file list.

        Args:
            files: Entries from a ScanResult (directories are ignored where
                   only files make sense)

        Returns:
            ProjectAnalysis for the entries
        """
        entries = list(files)
        analysis = ProjectAnalysis(
            project_type=self.detect_project_type(entries),
            language_stats=self.analyze_languages(entries),
            dependency_files=self.find_dependency_files(entries),
            config_files=self.find_config_files(entries),
            estimated_lines=self.estimate_lines_of_code(entries),
        )
        logger.debug(
            f"Analyzed {len(entries)} entries: type={analysis.project_type}, "
            f"languages={len(analysis.language_stats)}, lines~{analysis.estimated_lines}"
        )
        return analysis

    def detect_project_type(self, files: Sequence[FileInfo]) -> str:
        """
        Detect the project ecosystem.

        The first marker file in input order decides. Without a marker, the
        most common tracked extension decides; ties go to the extension listed
        first in the registry's project type table.
        """
        for f in files:
            if f.is_dir:
                continue
            project_type = self._registry.marker_project_type(f.name)
            if project_type is not None:
                return project_type

        project_types = self._registry.project_types
        counts = Counter(
            ext
            for ext in (f.extension.lower() for f in files if not f.is_dir)
            if ext in project_types
        )
        if not counts:
            return UNKNOWN_PROJECT_TYPE

        best_count = max(counts.values())
        for ext, project_type in project_types.items():
            if counts.get(ext) == best_count:
                return project_type

        return UNKNOWN_PROJECT_TYPE

    def analyze_languages(self, files: Sequence[FileInfo]) -> list[LanguageStat]:
        """
        Build per-language statistics.

        Percentages are relative to the bytes of all language-mapped files.
        Results are sorted by total size descending, then by language name.
        """
        stats: dict[str, LanguageStat] = {}
        tracked_size = 0

        for f in files:
            if f.is_dir:
                continue
            language = self._registry.extension_to_language(f.extension)
            if language is None:
                continue
            stat = stats.setdefault(language, LanguageStat(language=language))
            stat.file_count += 1
            stat.total_size += f.size
            tracked_size += f.size

        for stat in stats.values():
            stat.percentage = stat.total_size / tracked_size * 100.0 if tracked_size > 0 else 0.0

        return sorted(stats.values(), key=lambda s: (-s.total_size, s.language))

    def find_dependency_files(self, files: Sequence[FileInfo]) -> list[str]:
        """Paths of dependency manifests and lockfiles, in input order."""
        return [
            f.path
            for f in files
            if not f.is_dir and self._registry.is_dependency_filename(f.name)
        ]

    def find_config_files(self, files: Sequence[FileInfo]) -> list[str]:
        """Paths of configuration files, in input order."""
        return [
            f.path
            for f in files
            if not f.is_dir and self._registry.is_project_config_filename(f.name)
        ]

    def estimate_lines_of_code(self, files: Sequence[FileInfo]) -> int:
        """
        Estimate lines of source code from file sizes.

        This is an approximation (size // AVERAGE_BYTES_PER_LINE per source
        file), not a line count; file contents are never read.
        """
        return sum(
            f.size // AVERAGE_BYTES_PER_LINE
            for f in files
            if not f.is_dir and self._registry.is_source_code(f.extension)
        )


def analyze_project(files: Iterable[FileInfo]) -> ProjectAnalysis:
    """Analyze a file list with the default classifier registry."""
    return ProjectAnalyzer().analyze(files)
