"""Tag records and the sorted tags-file index built from them."""

from __future__ import annotations

import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass


class TagKind(enum.Enum):
    NAMESPACE = "n"
    INTERFACE = "i"
    CLASS = "c"
    FUNCTION = "f"
    CONSTANT = "d"
    PROPERTY = "v"

    @property
    def letter(self) -> str:
        return self.value


# Order matters: backslashes first, or the later escapes get escaped again.
_PATTERN_ESCAPES = (
    ("\\", "\\\\"),
    ("$", "\\$"),
    ("^", "\\^"),
    ("\n", ";"),
)


def escape_pattern(pattern: str) -> str:
    for needle, replacement in _PATTERN_ESCAPES:
        pattern = pattern.replace(needle, replacement)
    return pattern


def search_command(pattern: str) -> str:
    """Wrap a pattern in the ex command that relocates it without clobbering @/."""
    return f'let _s=@/ | /{escape_pattern(pattern)}/; | let @/=_s";"'


@dataclass(frozen=True)
class Tag:
    name: str
    path: str
    pattern: str
    kind: TagKind
    line: int
    scope: str | None = None
    extras: tuple[str, ...] = ()
    access: str | None = None

    def fields(self, path: str | None = None) -> list[str]:
        """Tab-separated columns of this tag's line, optionally with a rewritten path."""
        columns = [
            self.name,
            self.path if path is None else path,
            self.pattern,
            self.kind.letter,
            f"lineno:{self.line}",
        ]
        if self.scope is not None:
            columns.append(self.scope)
        columns.extend(self.extras)
        if self.access is not None:
            columns.append(f"access:{self.access}")
        return columns


def relative_path(base: str, dest: str) -> str:
    """Express ``dest`` relative to the directory ``base``.

    Both are absolute ``/``-separated paths. Shared leading segments are
    dropped and each remaining base segment becomes a ``..``.
    """
    base_parts = base.rstrip("/").split("/")
    dest_parts = dest.rstrip("/").split("/")

    common = 0
    while (
        common < len(base_parts)
        and common < len(dest_parts)
        and base_parts[common] == dest_parts[common]
    ):
        common += 1

    ups = [".."] * (len(base_parts) - common)
    return "/".join(ups + dest_parts[common:])


class TagIndex:
    """All tags collected during a run, across files."""

    def __init__(self) -> None:
        self._tags: list[Tag] = []

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._tags)

    def add(self, tag: Tag) -> None:
        self._tags.append(tag)

    def add_all(self, tags: Iterable[Tag]) -> None:
        self._tags.extend(tags)

    def lines(self, base: str) -> list[str]:
        rendered = [
            "\t".join(tag.fields(relative_path(base, tag.path)))
            for tag in self._tags
        ]
        # Code point order equals UTF-8 byte order
        rendered.sort()
        return rendered

    def render(self, base: str) -> str:
        return "\n".join(self.lines(base)) + "\n"
