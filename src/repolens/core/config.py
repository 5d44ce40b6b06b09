"""
Configuration module for repolens.

Supports loading from YAML/JSON files with environment variable overrides.
Default values are loaded from defaults.yaml for maintainability.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from repolens.core.file_scanner.models import ScanConfig
from repolens.core.ignore_filter import DEFAULT_IGNORE_PATTERNS, FilterConfig

logger = logging.getLogger(__name__)

# Path to the default configuration file
_DEFAULTS_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

# Cache for default values
_defaults_cache: dict[str, Any] | None = None


def _load_defaults() -> dict[str, Any]:
    """Load default configuration values from defaults.yaml."""
    global _defaults_cache

    if _defaults_cache is not None:
        return _defaults_cache

    if not _DEFAULTS_CONFIG_PATH.exists():
        logger.warning(f"Defaults config not found: {_DEFAULTS_CONFIG_PATH}")
        _defaults_cache = {}
        return _defaults_cache

    try:
        content = _DEFAULTS_CONFIG_PATH.read_text(encoding="utf-8")
        _defaults_cache = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse defaults config: {e}")
        _defaults_cache = {}

    return _defaults_cache


def _get_default(section: str, key: str, fallback: Any = None) -> Any:
    """Get a default value from the defaults config."""
    defaults = _load_defaults()
    section_defaults = defaults.get(section) or {}
    value = section_defaults.get(key, fallback)
    # Never hand out the cached list itself
    return list(value) if isinstance(value, list) else value


@dataclass
class ScannerSettings:
    """Configuration for directory scanning and filtering."""

    ignore_patterns: list[str] = field(
        default_factory=lambda: _get_default(
            "scanner", "ignore_patterns", list(DEFAULT_IGNORE_PATTERNS)
        )
    )
    max_depth: Optional[int] = field(
        default_factory=lambda: _get_default("scanner", "max_depth", None)
    )
    parallel: bool = field(default_factory=lambda: _get_default("scanner", "parallel", True))
    follow_links: bool = field(
        default_factory=lambda: _get_default("scanner", "follow_links", False)
    )
    max_workers: Optional[int] = field(
        default_factory=lambda: _get_default("scanner", "max_workers", None)
    )
    respect_gitignore: bool = field(
        default_factory=lambda: _get_default("scanner", "respect_gitignore", False)
    )
    case_sensitive: bool = field(
        default_factory=lambda: _get_default("scanner", "case_sensitive", True)
    )
    match_segments: bool = field(
        default_factory=lambda: _get_default("scanner", "match_segments", False)
    )
    min_size: Optional[int] = field(
        default_factory=lambda: _get_default("scanner", "min_size", None)
    )
    max_size: Optional[int] = field(
        default_factory=lambda: _get_default("scanner", "max_size", None)
    )
    extensions: Optional[list[str]] = field(
        default_factory=lambda: _get_default("scanner", "extensions", None)
    )

    def filter_config(self) -> FilterConfig | None:
        """
        Build the size/extension filter, or None when no such rule is set.

        The filter carries no ignore patterns of its own; patterns are
        applied once by the scanner.
        """
        if self.min_size is None and self.max_size is None and self.extensions is None:
            return None

        builder = (
            FilterConfig.builder()
            .patterns([])
            .case_sensitive(self.case_sensitive)
            .match_segments(self.match_segments)
        )
        if self.min_size is not None:
            builder.min_size(self.min_size)
        if self.max_size is not None:
            builder.max_size(self.max_size)
        if self.extensions is not None:
            builder.extensions(self.extensions)
        return builder.build()

    def to_scan_config(self, path: Path | str = ".") -> ScanConfig:
        """Create the ScanConfig for scanning path with these settings."""
        return ScanConfig(
            path=str(path),
            max_depth=self.max_depth,
            ignore_patterns=tuple(self.ignore_patterns),
            parallel=self.parallel,
            follow_links=self.follow_links,
            max_workers=self.max_workers,
            respect_gitignore=self.respect_gitignore,
            case_sensitive=self.case_sensitive,
            match_segments=self.match_segments,
            filter_config=self.filter_config(),
        )


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = field(default_factory=lambda: _get_default("logging", "level", "WARNING"))
    format: str = field(
        default_factory=lambda: _get_default("logging", "format", "%(message)s")
    )


@dataclass
class RepolensConfig:
    """Main configuration class for repolens."""

    scanner: ScannerSettings = field(default_factory=ScannerSettings)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "RepolensConfig":
        """
        Load configuration from a YAML or JSON file.

        Args:
            path: Path to the configuration file (.yaml, .yml, or .json)

        Returns:
            RepolensConfig instance with loaded values

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValueError: If the file format is unsupported
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        content = path.read_text(encoding="utf-8")

        if path.suffix in (".yaml", ".yml"):
            data = yaml.safe_load(content) or {}
        elif path.suffix == ".json":
            data = json.loads(content) if content.strip() else {}
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        if not isinstance(data, dict):
            raise ValueError(f"Invalid config format: expected mapping, got {type(data)}")

        return cls._from_dict(data)

    @classmethod
    def _from_dict(cls, data: dict) -> "RepolensConfig":
        """Create RepolensConfig from a dictionary."""
        config = cls()

        try:
            if "scanner" in data:
                config.scanner = ScannerSettings(**data["scanner"])
            if "logging" in data:
                config.logging = LoggingConfig(**data["logging"])
        except TypeError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

        return config

    def apply_env_overrides(self) -> "RepolensConfig":
        """
        Apply environment variable overrides to the configuration.

        Environment variables follow the pattern: REPOLENS_<SECTION>_<KEY>
        Examples:
            - REPOLENS_SCANNER_MAX_DEPTH
            - REPOLENS_SCANNER_PARALLEL
            - REPOLENS_SCANNER_IGNORE_PATTERNS (comma separated)
            - REPOLENS_LOGGING_LEVEL

        Returns:
            Self with environment overrides applied
        """
        env_mappings = {
            # Scanner config
            "REPOLENS_SCANNER_IGNORE_PATTERNS": ("scanner", "ignore_patterns", _parse_list),
            "REPOLENS_SCANNER_MAX_DEPTH": ("scanner", "max_depth", _parse_optional_int),
            "REPOLENS_SCANNER_PARALLEL": ("scanner", "parallel", _parse_bool),
            "REPOLENS_SCANNER_FOLLOW_LINKS": ("scanner", "follow_links", _parse_bool),
            "REPOLENS_SCANNER_MAX_WORKERS": ("scanner", "max_workers", _parse_optional_int),
            "REPOLENS_SCANNER_RESPECT_GITIGNORE": ("scanner", "respect_gitignore", _parse_bool),
            "REPOLENS_SCANNER_CASE_SENSITIVE": ("scanner", "case_sensitive", _parse_bool),
            "REPOLENS_SCANNER_MATCH_SEGMENTS": ("scanner", "match_segments", _parse_bool),
            "REPOLENS_SCANNER_MIN_SIZE": ("scanner", "min_size", _parse_optional_int),
            "REPOLENS_SCANNER_MAX_SIZE": ("scanner", "max_size", _parse_optional_int),
            "REPOLENS_SCANNER_EXTENSIONS": ("scanner", "extensions", _parse_list),
            # Logging config
            "REPOLENS_LOGGING_LEVEL": ("logging", "level", str),
            "REPOLENS_LOGGING_FORMAT": ("logging", "format", str),
        }

        for env_var, (section, key, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                section_obj = getattr(self, section)
                setattr(section_obj, key, converter(value))

        return self

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Serialize configuration to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    def to_json(self) -> str:
        """Serialize configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    def save(self, path: Path | str) -> None:
        """
        Save configuration to a file.

        Args:
            path: Path to save the configuration (.yaml, .yml, or .json)

        Raises:
            ValueError: If the file format is unsupported
        """
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            content = self.to_yaml()
        elif path.suffix == ".json":
            content = self.to_json()
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def _parse_bool(value: str) -> bool:
    """Parse a string to boolean."""
    return value.lower() in ("true", "1", "yes", "on")


def _parse_optional_int(value: str) -> Optional[int]:
    """Parse an integer; empty or 'none' means unset."""
    value = value.strip()
    if not value or value.lower() in ("none", "null"):
        return None
    return int(value)


def _parse_list(value: str) -> list[str]:
    """Parse a comma-separated list, dropping empty items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def load_config(
    config_path: Optional[Path | str] = None, apply_env: bool = True
) -> RepolensConfig:
    """
    Load configuration with optional environment variable overrides.

    Args:
        config_path: Optional path to config file. If None, uses defaults.
        apply_env: Whether to apply environment variable overrides.

    Returns:
        RepolensConfig instance
    """
    if config_path:
        config = RepolensConfig.from_file(config_path)
    else:
        config = RepolensConfig()

    if apply_env:
        config.apply_env_overrides()

    return config
