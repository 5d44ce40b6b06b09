"""
Service Layer - ProjectAnalyzer and its result models.
"""

from repolens.services.analysis_models import (
    UNKNOWN_PROJECT_TYPE,
    LanguageStat,
    ProjectAnalysis,
)
from repolens.services.project_analyzer import (
    AVERAGE_BYTES_PER_LINE,
    ProjectAnalyzer,
    analyze_project,
)

__all__ = [
    "ProjectAnalyzer",
    "analyze_project",
    "AVERAGE_BYTES_PER_LINE",
    # Models
    "LanguageStat",
    "ProjectAnalysis",
    "UNKNOWN_PROJECT_TYPE",
]
