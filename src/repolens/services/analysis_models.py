"""
Project analysis data models.

Contains dataclasses for language statistics and the aggregate analysis.
"""

from dataclasses import asdict, dataclass, field

UNKNOWN_PROJECT_TYPE = "Unknown"


@dataclass
class LanguageStat:
    """Aggregate size and file count for one language."""

    language: str
    file_count: int = 0
    total_size: int = 0
    percentage: float = 0.0


@dataclass
class ProjectAnalysis:
    """Characterization of a scanned tree, derived from its file list."""

    project_type: str = UNKNOWN_PROJECT_TYPE
    language_stats: list[LanguageStat] = field(default_factory=list)
    dependency_files: list[str] = field(default_factory=list)
    config_files: list[str] = field(default_factory=list)
    estimated_lines: int = 0

    def to_dict(self) -> dict:
        """Convert the analysis to a JSON-friendly dictionary."""
        return asdict(self)
