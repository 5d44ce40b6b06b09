"""
Classifier module for repolens.

Provides the fixed extension and filename lookup tables used by the project
analyzer and exposed as module-level predicates.
"""

from .registry import (
    ClassifierRegistry,
    extension_to_language,
    get_default_registry,
    is_binary,
    is_config_filename,
    is_dependency_filename,
    is_source_code,
    is_text,
)

__all__ = [
    "ClassifierRegistry",
    "get_default_registry",
    # Module-level predicates over the default registry
    "is_binary",
    "is_text",
    "is_source_code",
    "is_config_filename",
    "is_dependency_filename",
    "extension_to_language",
]
