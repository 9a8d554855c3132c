"""
ptags: incremental ctags-style index generator for PHP.

Scans PHP files and writes an editor "tags" file with one line per namespace,
interface, class, function, constant and property. Each line carries a search
command that relocates the declaration through its enclosing scopes, plus kind,
line number, scope, signature and access metadata.

Per-file results are cached under ~/.ptags (or $PTAGS_CACHE_DIR), so re-runs
only re-parse files that changed.
"""

try:
    from importlib.metadata import version
    __version__ = version("ptags")
except Exception:
    __version__ = "0.1.0"

from . import modules
from .modules.core import (
    CacheStore,
    DeclarationParser,
    PtagsError,
    Tag,
    TagGenerator,
    TagIndex,
    TagKind,
    tokenize,
)

__all__ = [
    "modules",
    "CacheStore",
    "DeclarationParser",
    "PtagsError",
    "Tag",
    "TagGenerator",
    "TagIndex",
    "TagKind",
    "tokenize",
]
