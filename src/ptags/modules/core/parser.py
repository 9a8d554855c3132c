"""Single-pass declaration parser over a PHP token stream.

Recognises namespace, interface, class, function, constant and property
declarations and rebuilds their nesting from a flat token sequence. Only the
tokens needed to find declarations are interpreted; function bodies and other
blocks are skipped by brace counting.

Each declaration yields one Tag whose search pattern is the first source line
of the declaration, prefixed by the patterns of every enclosing scope so an
editor can walk namespace -> class -> member to find it.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence

from .cursor import TokenCursor
from .lexer import Token, TokenKind
from .scope import ScopeKind, ScopeStack
from .tags import Tag, TagKind, search_command

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")

_VISIBILITY = {
    TokenKind.PRIVATE: "private",
    TokenKind.PROTECTED: "protected",
    TokenKind.PUBLIC: "public",
    TokenKind.VAR: "public",
}

# A declaration's name must appear before any of these.
_NAME_DELIMITERS = ("{", "(", ";")


def _opens_block(tok: Token) -> bool:
    return tok.matches("{") or tok.kind is TokenKind.CURLY_OPEN


class DeclarationParser:
    """Parse one file's tokens into Tags.

    ``on_tag`` is called with every Tag as soon as it is created, in source
    order. The parser also keeps its own list in ``tags``.
    """

    def __init__(
        self,
        tokens: Sequence[Token],
        file_path: str,
        scopes: ScopeStack | None = None,
        on_tag: Callable[[Tag], None] | None = None,
    ):
        self._cursor = TokenCursor(tokens)
        self._scopes = scopes if scopes is not None else ScopeStack()
        self._file_path = file_path
        self._on_tag = on_tag
        self.tags: list[Tag] = []

    def parse(self) -> list[Tag]:
        cursor = self._cursor
        tok = cursor.current
        while tok is not None:
            if tok.kind is TokenKind.NAMESPACE:
                self._scopes.reset()
                self._parse_namespace()
            else:
                self._parse_declaration(tok)
            tok = cursor.advance()
        return self.tags

    # -- dispatch -----------------------------------------------------------

    def _parse_declaration(self, tok: Token) -> None:
        kind = tok.kind
        if kind is TokenKind.INTERFACE:
            self._parse_interface()
        elif kind is TokenKind.CLASS:
            self._parse_class()
        elif kind is TokenKind.FUNCTION:
            self._parse_function()
        elif kind is TokenKind.CONST:
            self._parse_constant()

    # -- namespaces ---------------------------------------------------------

    def _parse_namespace(self) -> None:
        cursor = self._cursor
        depth = len(self._scopes)
        name: str | None = None
        line = 0

        cursor.start_collect()
        tok = cursor.advance()
        while tok is not None:
            if tok.kind is TokenKind.NAME:
                name, line = tok.text, tok.line
            elif tok.kind is TokenKind.NS_SEPARATOR:
                # Only the last segment of `A\B` is tagged; A becomes a bare scope
                if name is not None:
                    self._scopes.push(ScopeKind.NAMESPACE, name)
            elif tok.matches("{"):
                pattern = cursor.stop_collect()
                if name is not None:
                    self._create_tag(name, TagKind.NAMESPACE, line, pattern)
                    self._scopes.push(ScopeKind.NAMESPACE, name, pattern)
                self._parse_scoped_namespace()
                while len(self._scopes) > depth:
                    self._scopes.pop()
                return
            elif tok.matches(";"):
                pattern = cursor.stop_collect()
                if name is not None:
                    self._create_tag(name, TagKind.NAMESPACE, line, pattern)
                    self._scopes.push(ScopeKind.NAMESPACE, name, pattern)
                return
            tok = cursor.advance()
        cursor.stop_collect()

    def _parse_scoped_namespace(self) -> None:
        depth = 0
        tok = self._cursor.advance()
        while tok is not None:
            if tok.matches("}"):
                if depth == 0:
                    return
                depth -= 1
            elif _opens_block(tok):
                depth += 1
            else:
                self._parse_declaration(tok)
            tok = self._cursor.advance()

    # -- classes and interfaces ---------------------------------------------

    def _parse_interface(self) -> None:
        self._parse_type(TagKind.INTERFACE, ScopeKind.INTERFACE, skip_blocks=False)

    def _parse_class(self) -> None:
        self._parse_type(TagKind.CLASS, ScopeKind.CLASS, skip_blocks=True)

    def _parse_type(self, tag_kind: TagKind, scope_kind: ScopeKind, skip_blocks: bool) -> None:
        name, pattern, tok = self._parse_named(tag_kind)
        if name is None:
            self._skip_anonymous_body(tok)
            return

        self._scopes.push(scope_kind, name, pattern)
        if self._cursor.skip_to_one_of(("{",)) is not None:
            self._parse_members(skip_blocks)
        self._scopes.pop()

    def _parse_members(self, skip_blocks: bool) -> None:
        tok = self._cursor.advance()
        while tok is not None:
            kind = tok.kind
            if kind in _VISIBILITY:
                self._parse_visible()
            elif kind is TokenKind.CONST:
                self._parse_constant()
            elif kind is TokenKind.FUNCTION:
                self._parse_function("public")
            elif skip_blocks and _opens_block(tok):
                self._skip_block()
            elif tok.matches("}"):
                return
            tok = self._cursor.advance()

    def _skip_anonymous_body(self, tok: Token | None) -> None:
        """Skip `new class(...) { ... }` without tagging anything inside."""
        if tok is None or tok.matches(";"):
            return
        if tok.matches("{") or self._cursor.skip_to_one_of(("{",)) is not None:
            self._skip_block()

    def _parse_visible(self) -> None:
        """Parse members introduced by a visibility keyword.

        ``private $a, $b;`` tags both properties; the first gets the collected
        declaration text as its pattern, later ones their own variable text.
        """
        cursor = self._cursor
        access: str | None = None
        first_property = True

        cursor.start_collect()
        tok = cursor.current
        while tok is not None:
            kind = tok.kind
            if kind in _VISIBILITY:
                access = _VISIBILITY[kind]
            elif kind is TokenKind.VARIABLE:
                if not first_property:
                    cursor.start_collect()
                pattern = cursor.stop_collect()
                first_property = False
                self._create_tag(tok.text, TagKind.PROPERTY, tok.line, pattern, access=access)
            elif kind is TokenKind.FUNCTION:
                self._parse_function(access)
                return
            elif kind is TokenKind.CONST:
                cursor.stop_collect()
                self._parse_constant()
                return
            elif tok.matches(";"):
                break
            elif _opens_block(tok):
                # property hooks: `public string $x { get => ...; }`
                cursor.stop_collect()
                self._skip_block()
                return
            tok = cursor.advance()
        cursor.stop_collect()

    # -- functions and constants --------------------------------------------

    def _parse_function(self, access: str | None = None) -> None:
        cursor = self._cursor
        line = cursor.current.line
        name: str | None = None
        pattern: str | None = None
        extras: list[str] = []
        stop_pending = False
        terminated = False

        cursor.start_collect()
        tok = cursor.advance()
        while tok is not None:
            if stop_pending:
                # keep the token after the name, drop everything later
                pattern = cursor.stop_collect()
                stop_pending = False

            if tok.kind is TokenKind.NAME:
                if name is None and not extras:
                    name = tok.text
                    stop_pending = True
            elif tok.matches("("):
                signature = self._parse_parameter_list()
                if not extras:
                    extras.append(f"signature:{signature}")
            elif tok.matches("{"):
                self._skip_block()
                terminated = True
                break
            elif tok.matches(";"):
                terminated = True
                break
            tok = cursor.advance()
        cursor.stop_collect()

        if terminated and name is not None and pattern is not None:
            self._create_tag(name, TagKind.FUNCTION, line, pattern, extras, access)

    def _parse_parameter_list(self) -> str:
        """Consume ``( ... )`` including nested parentheses and return its text."""
        cursor = self._cursor
        parts: list[str] = []
        depth = 0
        tok = cursor.current
        while tok is not None:
            parts.append(tok.text)
            if tok.matches("("):
                depth += 1
            elif tok.matches(")"):
                depth -= 1
                if depth == 0:
                    break
            tok = cursor.advance()
        return _WHITESPACE_RE.sub(" ", "".join(parts))

    def _parse_constant(self) -> None:
        self._parse_named(TagKind.CONSTANT)

    def _parse_named(self, kind: TagKind) -> tuple[str | None, str, Token | None]:
        """Tag the declaration at the cursor by its first name.

        Returns ``(name, pattern, last token)``; ``name`` is None when a
        delimiter or the end of the stream came first.
        """
        cursor = self._cursor
        line = cursor.current.line
        name: str | None = None

        cursor.start_collect()
        tok = cursor.advance()
        while tok is not None:
            if tok.kind is TokenKind.NAME:
                name = tok.text
                break
            if tok.kind is TokenKind.SYMBOL and tok.text in _NAME_DELIMITERS:
                break
            tok = cursor.advance()
        pattern = cursor.stop_collect()

        if name is not None:
            self._create_tag(name, kind, line, pattern)
        return name, pattern, tok

    # -- helpers ------------------------------------------------------------

    def _skip_block(self) -> None:
        """Consume tokens through the `}` closing the block already opened."""
        depth = 1
        tok = self._cursor.advance()
        while tok is not None:
            if _opens_block(tok):
                depth += 1
            elif tok.matches("}"):
                depth -= 1
                if depth == 0:
                    return
            tok = self._cursor.advance()

    def _create_tag(
        self,
        name: str,
        kind: TagKind,
        line: int,
        pattern: str,
        extras: Sequence[str] = (),
        access: str | None = None,
    ) -> Tag:
        tag = Tag(
            name=name,
            path=self._file_path,
            pattern=search_command(self._scopes.scoped_pattern(pattern)),
            kind=kind,
            line=line,
            scope=self._scopes.current_label(),
            extras=tuple(extras),
            access=access,
        )
        self.tags.append(tag)
        if self._on_tag is not None:
            self._on_tag(tag)
        return tag


def parse_tokens(
    tokens: Sequence[Token],
    file_path: str,
    scopes: ScopeStack | None = None,
) -> list[Tag]:
    """Convenience wrapper: parse ``tokens`` and return the Tags in source order."""
    tags = DeclarationParser(tokens, file_path, scopes=scopes).parse()
    logger.debug("parser: %s -> %d tags", file_path, len(tags))
    return tags
