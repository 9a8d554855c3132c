"""
Input file collection for ptags.

Provides:
- WorkspaceConfig dataclass for holding config
- load_workspace_config() to parse .ptags.json
- should_include_path() to check a path against the exclude patterns
- iter_source_files() to walk a directory for source files
- collect_files() to expand command-line inputs into a file list
"""

import fnmatch
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Union

from .errors import DirectoryInputError


CONFIG_FILENAME = ".ptags.json"

DEFAULT_EXTENSIONS = [".php"]

# Default exclude patterns for VCS metadata and framework caches
DEFAULT_EXCLUDE_PATTERNS = [
    "**/.git/**",
    "app/cache/**",
    "**/node_modules/**",
]


@dataclass
class WorkspaceConfig:
    """Which files a recursive scan picks up."""

    extensions: List[str] = field(default_factory=lambda: DEFAULT_EXTENSIONS.copy())
    exclude_patterns: List[str] = field(default_factory=lambda: DEFAULT_EXCLUDE_PATTERNS.copy())


def load_workspace_config(project_path: Union[str, Path]) -> WorkspaceConfig:
    """
    Load workspace configuration from .ptags.json.

    Args:
        project_path: Directory holding the config file

    Returns:
        WorkspaceConfig with extensions and excludePatterns.
        Returns defaults if file is missing or invalid.
    """
    config_file = Path(project_path) / CONFIG_FILENAME

    if not config_file.exists():
        return WorkspaceConfig()

    try:
        with open(config_file, "r") as f:
            data = json.load(f)
    except (json.JSONDecodeError, IOError):
        # Invalid JSON or read error - return defaults
        return WorkspaceConfig()
    if not isinstance(data, dict):
        return WorkspaceConfig()

    extensions = data.get("extensions")
    exclude_patterns = data.get("excludePatterns")

    # Missing keys keep the defaults; an explicit [] is honoured
    if extensions is None:
        extensions = DEFAULT_EXTENSIONS.copy()
    if exclude_patterns is None:
        exclude_patterns = DEFAULT_EXCLUDE_PATTERNS.copy()

    return WorkspaceConfig(
        extensions=[_normalize_extension(ext) for ext in extensions],
        exclude_patterns=list(exclude_patterns),
    )


def _normalize_extension(ext: str) -> str:
    ext = ext.lower()
    return ext if ext.startswith(".") else f".{ext}"


def _normalize_path(path: str) -> str:
    """
    Normalize a path for consistent matching.

    - Converts backslashes to forward slashes
    - Removes leading ./
    - Removes trailing /
    """
    path = path.replace("\\", "/")

    if path.startswith("./"):
        path = path[2:]

    return path.rstrip("/")


def _pattern_variants(pattern: str) -> List[str]:
    # `**/x` also matches at the top level, `x/**` also matches x itself
    variants = [pattern]
    if pattern.startswith("**/"):
        variants.append(pattern[3:])
    for variant in list(variants):
        if variant.endswith("/**"):
            variants.append(variant[:-3])
    return variants


def _matches_any_pattern(path: str, patterns: List[str]) -> bool:
    """
    Check if path matches any of the glob patterns.

    Args:
        path: Path to check (should be normalized)
        patterns: List of glob patterns

    Returns:
        True if path matches any pattern
    """
    for pattern in patterns:
        for variant in _pattern_variants(pattern):
            if fnmatch.fnmatch(path, variant):
                return True
    return False


def should_include_path(path: str, config: WorkspaceConfig) -> bool:
    """True unless ``path`` (relative to the scan root) matches an exclude pattern."""
    return not _matches_any_pattern(_normalize_path(path), config.exclude_patterns)


def iter_source_files(
    root: Union[str, Path],
    config: WorkspaceConfig | None = None,
) -> Iterator[Path]:
    """Walk ``root`` and yield source files in a stable, sorted order.

    Excluded directories are pruned rather than filtered file by file.
    """
    config = config or WorkspaceConfig()
    root_path = Path(root)
    extensions = {_normalize_extension(ext) for ext in config.extensions}

    for dirpath, dirnames, filenames in os.walk(root_path):
        rel_dir = os.path.relpath(dirpath, root_path)
        prefix = "" if rel_dir == "." else rel_dir + "/"

        dirnames[:] = sorted(
            d for d in dirnames if should_include_path(prefix + d, config)
        )

        for filename in sorted(filenames):
            if Path(filename).suffix.lower() not in extensions:
                continue
            if not should_include_path(prefix + filename, config):
                continue
            yield Path(dirpath) / filename


def collect_files(
    paths: Iterable[Union[str, Path]],
    recursive: bool = False,
    config: WorkspaceConfig | None = None,
) -> List[Path]:
    """Expand command-line inputs into source files, preserving their order.

    Files are taken as given (no extension check). Directories require
    ``recursive``; otherwise DirectoryInputError is raised.
    """
    files: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            if not recursive:
                raise DirectoryInputError(str(raw))
            files.extend(iter_source_files(path, config))
        else:
            files.append(path)
    return files
