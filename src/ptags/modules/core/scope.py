"""Stack of enclosing namespace/class/interface declarations."""

from __future__ import annotations

import enum
from dataclasses import dataclass

PATTERN_SEPARATOR = "/;/"


class ScopeKind(enum.Enum):
    NAMESPACE = "namespace"
    CLASS = "class"
    INTERFACE = "interface"


@dataclass(frozen=True)
class ScopeFrame:
    kind: ScopeKind
    name: str
    pattern: str | None = None


class ScopeStack:
    def __init__(self) -> None:
        self._frames: list[ScopeFrame] = []

    def __len__(self) -> int:
        return len(self._frames)

    def __bool__(self) -> bool:
        return bool(self._frames)

    @property
    def frames(self) -> tuple[ScopeFrame, ...]:
        return tuple(self._frames)

    def push(self, kind: ScopeKind, name: str, pattern: str | None = None) -> None:
        self._frames.append(ScopeFrame(kind, name, pattern))

    def pop(self) -> ScopeFrame:
        return self._frames.pop()

    def reset(self) -> None:
        self._frames.clear()

    def current_label(self) -> str | None:
        """Return ``kind:Outer::Inner`` for the innermost frame, None outside any scope."""
        if not self._frames:
            return None
        names = "::".join(frame.name for frame in self._frames)
        return f"{self._frames[-1].kind.value}:{names}"

    def scoped_pattern(self, local_pattern: str) -> str:
        """Chain the enclosing declarations' patterns in front of ``local_pattern``.

        Frames pushed without a pattern (intermediate segments of a dotted
        namespace name) contribute nothing.
        """
        parts = [frame.pattern for frame in self._frames if frame.pattern is not None]
        parts.append(local_pattern)
        return PATTERN_SEPARATOR.join(parts)
