"""Per-file orchestration: cache lookup, tokenizing, parsing, cache refresh."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from . import lexer
from .cache import CacheRecord, CacheStore
from .errors import SourceReadError
from .lexer import Token
from .parser import DeclarationParser
from .scope import ScopeStack
from .tags import Tag, TagIndex

logger = logging.getLogger(__name__)


def resolve_source(path: str | Path) -> str:
    """Canonical absolute path of an existing source file."""
    try:
        return Path(path).resolve(strict=True).as_posix()
    except OSError as exc:
        raise SourceReadError(str(path), exc.strerror or str(exc)) from exc


class TagGenerator:
    """Build a TagIndex from source files, reusing cached results when fresh.

    Files are processed one at a time, in the order given. A cache directory is
    assumed to be used by one run at a time.
    """

    def __init__(
        self,
        index: TagIndex | None = None,
        cache: CacheStore | None = None,
        tokenize: Callable[[bytes], Sequence[Token]] | None = None,
    ):
        self.index = index if index is not None else TagIndex()
        self.cache = cache if cache is not None else CacheStore()
        self._tokenize = tokenize if tokenize is not None else lexer.tokenize
        self._scopes = ScopeStack()
        self.parsed_files = 0
        self.cached_files = 0

    def process_file(self, path: str | Path) -> list[Tag]:
        real_path = resolve_source(path)

        record = self.cache.load(real_path)
        if record.valid:
            self.index.add_all(record.tags)
            self.cached_files += 1
            return list(record.tags)

        try:
            source = Path(real_path).read_bytes()
        except OSError as exc:
            raise SourceReadError(real_path, exc.strerror or str(exc)) from exc

        self._parse_into(record, source)
        self.cache.save(record)
        self.parsed_files += 1
        logger.debug("driver: parsed %s (%d tags)", real_path, len(record.tags))
        return list(record.tags)

    def _parse_into(self, record: CacheRecord, source: bytes) -> None:
        def collect(tag: Tag) -> None:
            self.index.add(tag)
            record.tags.append(tag)

        self._scopes.reset()
        tokens = self._tokenize(source)
        DeclarationParser(
            tokens,
            record.file_path,
            scopes=self._scopes,
            on_tag=collect,
        ).parse()

    def process_files(self, paths: Iterable[str | Path]) -> TagIndex:
        for path in paths:
            self.process_file(path)
        logger.debug(
            "driver: %d parsed, %d from cache, %d tags",
            self.parsed_files,
            self.cached_files,
            len(self.index),
        )
        return self.index

    def render(self, base: str | Path) -> str:
        return self.index.render(Path(base).as_posix())
