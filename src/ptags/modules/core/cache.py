"""Per-file tag cache for incremental runs.

Stores the tags extracted from each source file so an unchanged file is never
re-parsed.

Cache location: ``$PTAGS_CACHE_DIR`` or ``~/.ptags/``, mirroring the source
file's absolute path (``/src/app/Foo.php`` -> ``~/.ptags/src/app/Foo.php.json``).
Validity: the entry is fresh while its own mtime is not older than the source's.
Storage: one versioned JSON document per source file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from .errors import CacheWriteError
from .tags import Tag, TagKind

logger = logging.getLogger(__name__)

CACHE_FORMAT = "ptags-cache"
CACHE_VERSION = 1
CACHE_DIR_ENV = "PTAGS_CACHE_DIR"


@dataclass
class CacheRecord:
    """Tags extracted from one source file."""

    file_path: str
    valid: bool = False
    tags: list[Tag] = field(default_factory=list)


def default_cache_root() -> Path:
    override = os.environ.get(CACHE_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".ptags"


def _tag_to_dict(tag: Tag) -> dict:
    return {
        "name": tag.name,
        "path": tag.path,
        "pattern": tag.pattern,
        "kind": tag.kind.letter,
        "line": tag.line,
        "scope": tag.scope,
        "extras": list(tag.extras),
        "access": tag.access,
    }


def _tag_from_dict(d: dict) -> Tag:
    return Tag(
        name=d["name"],
        path=d["path"],
        pattern=d["pattern"],
        kind=TagKind(d["kind"]),
        line=int(d["line"]),
        scope=d.get("scope"),
        extras=tuple(d.get("extras", ())),
        access=d.get("access"),
    )


def _record_to_dict(record: CacheRecord) -> dict:
    return {
        "format": CACHE_FORMAT,
        "version": CACHE_VERSION,
        "file_path": record.file_path,
        "tags": [_tag_to_dict(tag) for tag in record.tags],
    }


def _record_from_dict(d: dict) -> CacheRecord:
    if not isinstance(d, dict):
        raise ValueError("cache entry is not an object")
    if d.get("format") != CACHE_FORMAT or d.get("version") != CACHE_VERSION:
        raise ValueError(f"unsupported cache format {d.get('format')!r} v{d.get('version')!r}")
    return CacheRecord(
        file_path=d["file_path"],
        valid=True,
        tags=[_tag_from_dict(td) for td in d.get("tags", [])],
    )


class CacheStore:
    """File-system cache of CacheRecords keyed by absolute source path."""

    def __init__(self, root: Path | None = None, enabled: bool = True):
        self._root = Path(root) if root is not None else default_cache_root()
        self._enabled = enabled
        self._hits = 0
        self._misses = 0

    @property
    def root(self) -> Path:
        return self._root

    @property
    def enabled(self) -> bool:
        return self._enabled

    def cache_path(self, real_path: str | Path) -> Path:
        """Derive the on-disk cache file from an absolute source path."""
        source = Path(real_path)
        relative = Path(*source.parts[1:]) if source.is_absolute() else source
        return self._root / relative.parent / f"{relative.name}.json"

    def _miss(self, real_path: str, reason: str) -> CacheRecord:
        logger.debug("cache: miss for %s (%s)", real_path, reason)
        self._misses += 1
        return CacheRecord(file_path=real_path)

    def load(self, real_path: str) -> CacheRecord:
        """Return the cached record if still fresh, else an empty invalid one."""
        if not self._enabled:
            return self._miss(real_path, "disabled")

        cp = self.cache_path(real_path)
        try:
            cache_mtime = cp.stat().st_mtime_ns
        except OSError:
            return self._miss(real_path, "no entry")

        try:
            source_mtime = os.stat(real_path).st_mtime_ns
        except OSError as exc:
            return self._miss(real_path, f"source stat failed: {exc}")

        if cache_mtime < source_mtime:
            return self._miss(real_path, "stale")

        try:
            with open(cp, encoding="utf-8") as f:
                record = _record_from_dict(json.load(f))
        except (OSError, ValueError, KeyError, TypeError) as exc:
            logger.debug("cache: corrupt entry for %s: %s", real_path, exc)
            return self._miss(real_path, "corrupt")

        record.file_path = real_path
        self._hits += 1
        logger.debug("cache: hit for %s (%d tags)", real_path, len(record.tags))
        return record

    def save(self, record: CacheRecord) -> None:
        """Mark ``record`` valid and persist it atomically."""
        record.valid = True
        if not self._enabled:
            return

        cp = self.cache_path(record.file_path)
        try:
            cp.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as exc:
            raise CacheWriteError(str(cp.parent), exc.strerror or str(exc)) from exc

        try:
            fd, tmp_name = tempfile.mkstemp(dir=cp.parent, prefix=f".{cp.name}.", suffix=".tmp")
        except OSError as exc:
            raise CacheWriteError(str(cp), exc.strerror or str(exc)) from exc

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(_record_to_dict(record), f, separators=(",", ":"))
            os.replace(tmp_name, cp)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise CacheWriteError(str(cp), exc.strerror or str(exc)) from exc

        self._stamp(cp, record.file_path)

    def _stamp(self, cp: Path, real_path: str) -> None:
        """Keep the entry's mtime at or after the source's, even if the source is dated in the future."""
        try:
            source_mtime = os.stat(real_path).st_mtime_ns
        except OSError:
            return
        try:
            entry_mtime = cp.stat().st_mtime_ns
            if entry_mtime < source_mtime:
                os.utime(cp, ns=(source_mtime, source_mtime))
        except OSError as exc:
            raise CacheWriteError(str(cp), exc.strerror or str(exc)) from exc

    def invalidate(self, real_path: str) -> None:
        """Remove the cache entry for a file."""
        self.cache_path(real_path).unlink(missing_ok=True)

    def clear(self) -> None:
        """Remove all cached entries."""
        if not self._root.is_dir():
            return
        for p in self._root.rglob("*.json"):
            p.unlink(missing_ok=True)

    @property
    def stats(self) -> dict[str, int]:
        return {"hits": self._hits, "misses": self._misses}
