"""
Root .gitignore support for the directory scanner.

Only the .gitignore at the scan root is read; patterns are compiled with
pathspec (gitignore semantics) and matched against paths relative to the
root.
"""

import logging
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)


def load_gitignore_spec(root_path: Path) -> pathspec.PathSpec | None:
    """
    Load and compile patterns from root_path/.gitignore.

    Args:
        root_path: Scan root directory

    Returns:
        Compiled PathSpec, or None if there is no usable .gitignore
    """
    gitignore_path = Path(root_path) / ".gitignore"
    if not gitignore_path.is_file():
        return None

    try:
        content = gitignore_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to read .gitignore: {e}")
        return None

    patterns = []
    for line in content.splitlines():
        line = line.strip()
        # Skip empty lines and comments
        if line and not line.startswith("#"):
            patterns.append(line)

    if not patterns:
        return None

    logger.debug(f"Loaded {len(patterns)} patterns from {gitignore_path}")
    return pathspec.GitIgnoreSpec.from_lines(patterns)


def gitignore_matches(spec: pathspec.PathSpec, rel_path: str, is_dir: bool) -> bool:
    """
    Check a root-relative path against a compiled .gitignore spec.

    Directories are also checked with a trailing slash so that
    directory-only patterns ('build/') apply to them.
    """
    rel_path_str = rel_path.replace("\\", "/")
    if is_dir:
        return spec.match_file(rel_path_str) or spec.match_file(rel_path_str + "/")
    return spec.match_file(rel_path_str)
