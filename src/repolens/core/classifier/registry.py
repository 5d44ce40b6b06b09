"""
Classifier registry for mapping file extensions and names to categories.
"""

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

logger = logging.getLogger(__name__)

# Default path to the classification tables
_DEFAULT_CLASSIFIERS_CONFIG = Path(__file__).parent / "classifiers.yaml"

_MAPPING_SECTIONS = ("languages", "project_types", "marker_files")
_SET_SECTIONS = (
    "binary_extensions",
    "text_extensions",
    "source_extensions",
    "dependency_files",
    "config_files",
    "config_manifests",
)
_SUFFIX_SECTIONS = ("config_suffixes", "loose_config_suffixes")


def _normalize_extension(extension: str) -> str:
    """Lowercase an extension and strip a leading dot ('.PY' -> 'py')."""
    return extension.lower().lstrip(".")


class ClassifierRegistry:
    """
    Read-only lookup tables for extension and filename classification.

    All tables are loaded once, when the registry is built, and exposed as
    frozensets and mapping proxies. The source extension table is the single
    definition of what counts as source code; the project analyzer uses it
    for the line estimate.

    Example:
        >>> registry = ClassifierRegistry()
        >>> registry.extension_to_language("rs")
        'Rust'
        >>> registry.is_source_code(".py")
        True
    """

    def __init__(self, data: Mapping[str, Any] | None = None):
        """
        Initialize the registry.

        Args:
            data: Parsed table data. If None, the packaged classifiers.yaml is loaded.
        """
        if data is None:
            data = self._read_yaml(_DEFAULT_CLASSIFIERS_CONFIG)

        self._languages = self._build_mapping(data, "languages", normalize_keys=True)
        self._project_types = self._build_mapping(data, "project_types", normalize_keys=True)
        self._marker_files = self._build_mapping(data, "marker_files", normalize_keys=False)

        self._binary = self._build_set(data, "binary_extensions", normalize=True)
        self._text = self._build_set(data, "text_extensions", normalize=True)
        self._source = self._build_set(data, "source_extensions", normalize=True)
        self._dependency_files = self._build_set(data, "dependency_files", normalize=False)
        self._config_files = self._build_set(data, "config_files", normalize=False)
        self._config_manifests = self._build_set(data, "config_manifests", normalize=False)

        self._config_suffixes = tuple(str(s) for s in data.get("config_suffixes") or ())
        self._loose_config_suffixes = tuple(
            str(s) for s in data.get("loose_config_suffixes") or ()
        )

    @classmethod
    def from_yaml(cls, config_path: Path | str) -> "ClassifierRegistry":
        """
        Create a ClassifierRegistry from a YAML file.

        Args:
            config_path: Path to the YAML tables file

        Returns:
            ClassifierRegistry instance

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the file format is invalid
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Classifier tables not found: {path}")
        return cls(cls._read_yaml(path))

    @staticmethod
    def _read_yaml(config_path: Path) -> dict[str, Any]:
        """
        Read classification tables from a YAML file.

        Expected format:
            languages:
              ext: Language Name
            source_extensions: [ext1, ext2]
        """
        if not config_path.exists():
            logger.warning(f"Classifier config not found: {config_path}, using empty tables")
            return {}

        try:
            data = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse classifier config: {e}")
            raise ValueError(f"Invalid YAML in classifier config: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(
                f"Invalid classifier config format: expected dict, got {type(data)}"
            )

        for section in _MAPPING_SECTIONS:
            if section in data and not isinstance(data[section], dict):
                raise ValueError(f"Section '{section}' must be a mapping")
        for section in _SET_SECTIONS + _SUFFIX_SECTIONS:
            if section in data and not isinstance(data[section], list):
                raise ValueError(f"Section '{section}' must be a list")

        return data

    @staticmethod
    def _build_mapping(
        data: Mapping[str, Any], section: str, normalize_keys: bool
    ) -> Mapping[str, str]:
        raw = data.get(section) or {}
        table: dict[str, str] = {}
        for key, value in raw.items():
            key = _normalize_extension(str(key)) if normalize_keys else str(key)
            table[key] = str(value)
        return MappingProxyType(table)

    @staticmethod
    def _build_set(data: Mapping[str, Any], section: str, normalize: bool) -> frozenset[str]:
        raw = data.get(section) or []
        if normalize:
            return frozenset(_normalize_extension(str(item)) for item in raw)
        return frozenset(str(item) for item in raw)

    # ------------------------------------------------------------------
    # Extension predicates
    # ------------------------------------------------------------------

    def is_binary(self, extension: str) -> bool:
        """Check if an extension denotes a binary format."""
        return _normalize_extension(extension) in self._binary

    def is_text(self, extension: str) -> bool:
        """Check if an extension denotes a text format."""
        return _normalize_extension(extension) in self._text

    def is_source_code(self, extension: str) -> bool:
        """Check if an extension denotes program source code."""
        return _normalize_extension(extension) in self._source

    def extension_to_language(self, extension: str) -> str | None:
        """
        Map an extension to a human-readable language label.

        Args:
            extension: File extension with or without the dot (e.g. 'rs', '.rs')

        Returns:
            Language label, or None if the extension is not tracked
        """
        return self._languages.get(_normalize_extension(extension))

    def extension_project_type(self, extension: str) -> str | None:
        """Map an extension to the project type it suggests, if any."""
        return self._project_types.get(_normalize_extension(extension))

    # ------------------------------------------------------------------
    # Filename predicates
    # ------------------------------------------------------------------

    def marker_project_type(self, name: str) -> str | None:
        """Return the project type indicated by a marker filename, if any."""
        return self._marker_files.get(name)

    def is_dependency_filename(self, name: str) -> bool:
        """Check if a filename is a dependency manifest or lockfile."""
        return name in self._dependency_files

    def is_config_filename(self, name: str) -> bool:
        """
        Check if a filename looks like configuration.

        True for dotfiles, known configuration names (including manifests
        such as package.json), and names ending with a configuration suffix.
        """
        if name.startswith("."):
            return True
        if name in self._config_files or name in self._config_manifests:
            return True
        return name.endswith(self._config_suffixes + self._loose_config_suffixes)

    def is_project_config_filename(self, name: str) -> bool:
        """
        Check if a filename should be reported as a project config file.

        Narrower than is_config_filename: manifests are reported as
        dependency files instead, and only the tool config suffixes count.
        """
        if name.startswith("."):
            return True
        if name in self._config_files:
            return True
        return name.endswith(self._config_suffixes)

    # ------------------------------------------------------------------
    # Table views
    # ------------------------------------------------------------------

    @property
    def languages(self) -> Mapping[str, str]:
        """Extension to language mapping."""
        return self._languages

    @property
    def project_types(self) -> Mapping[str, str]:
        """Extension to project type mapping, in canonical tie-break order."""
        return self._project_types

    @property
    def marker_files(self) -> Mapping[str, str]:
        """Marker filename to project type mapping."""
        return self._marker_files

    @property
    def source_extensions(self) -> frozenset[str]:
        """All source-code extensions."""
        return self._source

    @property
    def dependency_filenames(self) -> frozenset[str]:
        """All dependency manifest and lockfile names."""
        return self._dependency_files


# Global default registry instance
_default_registry = ClassifierRegistry()


def get_default_registry() -> ClassifierRegistry:
    """Get the global default classifier registry."""
    return _default_registry


def is_binary(extension: str) -> bool:
    return _default_registry.is_binary(extension)


def is_text(extension: str) -> bool:
    return _default_registry.is_text(extension)


def is_source_code(extension: str) -> bool:
    return _default_registry.is_source_code(extension)


def is_config_filename(name: str) -> bool:
    return _default_registry.is_config_filename(name)


def is_dependency_filename(name: str) -> bool:
    return _default_registry.is_dependency_filename(name)


def extension_to_language(extension: str) -> str | None:
    return _default_registry.extension_to_language(extension)
