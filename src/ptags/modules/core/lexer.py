"""Flatten a tree-sitter PHP syntax tree into a typed token stream.

The declaration parser never looks at the syntax tree. It consumes the leaves
in source order, with the text between leaves (whitespace) emitted as tokens of
its own, so that concatenating every token's text reproduces the file.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from .errors import LexerUnavailableError

logger = logging.getLogger(__name__)


class TokenKind(enum.Enum):
    NAMESPACE = "namespace"
    CLASS = "class"
    INTERFACE = "interface"
    FUNCTION = "function"
    CONST = "const"
    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"
    VAR = "var"
    NAME = "name"
    VARIABLE = "variable"
    NS_SEPARATOR = "ns_separator"
    CURLY_OPEN = "curly_open"  # `{` / `${` opening a string interpolation
    SYMBOL = "symbol"
    KEYWORD = "keyword"
    LITERAL = "literal"
    COMMENT = "comment"
    WHITESPACE = "whitespace"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int

    def matches(self, text: str) -> bool:
        """True for a punctuation token with exactly this text."""
        return self.kind is TokenKind.SYMBOL and self.text == text


_KEYWORD_KINDS = {
    "namespace": TokenKind.NAMESPACE,
    "class": TokenKind.CLASS,
    "interface": TokenKind.INTERFACE,
    "function": TokenKind.FUNCTION,
    "const": TokenKind.CONST,
    "public": TokenKind.PUBLIC,
    "protected": TokenKind.PROTECTED,
    "private": TokenKind.PRIVATE,
    "var": TokenKind.VAR,
}

# Named nodes emitted as a single token instead of being split into leaves.
_ATOMIC_NODES = {
    "name": TokenKind.NAME,
    "variable_name": TokenKind.VARIABLE,
    "comment": TokenKind.COMMENT,
}

# Named leaves that carry a keyword (depends on grammar version).
_MODIFIER_NODES = {"visibility_modifier", "var_modifier"}

_STRING_NODES = {
    "encapsed_string",
    "heredoc",
    "heredoc_body",
    "shell_command_expression",
}

# After these, a reserved word is a member name (`Foo::class`, `$x->function`).
_MEMBER_ACCESS = {"::", "->", "?->"}

_USE_IMPORT_NODES = {
    "namespace_use_declaration",
    "namespace_use_clause",
    "namespace_use_group_clause",
    "namespace_function_or_const",
}

# Under these parents the keyword names or imports something, it does not declare
# (`namespace\foo()`, `use function Foo\bar;`, `use Foo\{const BAR}`).
_NON_DECLARING_PARENTS = {
    TokenKind.NAMESPACE: {"relative_name", "namespace_name_as_prefix"},
    TokenKind.FUNCTION: _USE_IMPORT_NODES,
    TokenKind.CONST: _USE_IMPORT_NODES,
}


@lru_cache(maxsize=None)
def _php_language() -> Any | None:
    try:
        from tree_sitter import Language
        import tree_sitter_php
    except ImportError:
        return None

    factory = getattr(tree_sitter_php, "language_php", None) or getattr(
        tree_sitter_php, "language", None
    )
    if factory is None:
        return None
    return Language(factory())


@lru_cache(maxsize=None)
def _get_parser() -> Any:
    lang = _php_language()
    if lang is None:
        raise LexerUnavailableError()

    from tree_sitter import Parser

    try:
        parser = Parser()
        parser.language = lang
    except Exception:
        parser = Parser(lang)
    return parser


def _classify_leaf(
    node: Any,
    text: str,
    in_string: bool,
    parent_type: str | None,
    previous: Token | None,
) -> TokenKind:
    node_type = node.type
    if node_type in _ATOMIC_NODES:
        return _ATOMIC_NODES[node_type]

    if not node.is_named or node_type in _MODIFIER_NODES:
        keyword = _KEYWORD_KINDS.get(text.lower())
        if keyword is not None:
            if previous is not None and previous.kind is TokenKind.SYMBOL and previous.text in _MEMBER_ACCESS:
                return TokenKind.NAME
            if parent_type in _NON_DECLARING_PARENTS.get(keyword, ()):
                return TokenKind.KEYWORD
            return keyword

    if node.is_named:
        return TokenKind.LITERAL
    if text == "\\":
        return TokenKind.NS_SEPARATOR
    if text == "${" or (text == "{" and in_string):
        return TokenKind.CURLY_OPEN
    if text.replace("_", "a").isalnum():
        return TokenKind.KEYWORD
    return TokenKind.SYMBOL


def tokenize(source: bytes | str) -> list[Token]:
    """Tokenize PHP source into a flat list of tokens covering every byte."""
    if isinstance(source, str):
        source = source.encode("utf-8")

    tree = _get_parser().parse(source)

    tokens: list[Token] = []
    line = 1
    position = 0
    previous: Token | None = None

    def emit(kind: TokenKind, raw: bytes) -> Token:
        nonlocal line
        token = Token(kind, raw.decode("utf-8", errors="replace"), line)
        tokens.append(token)
        line += raw.count(b"\n")
        return token

    def emit_gap(end: int) -> None:
        gap = source[position:end]
        if gap:
            emit(TokenKind.WHITESPACE if gap.isspace() else TokenKind.LITERAL, gap)

    stack: list[tuple[Any, bool, str | None]] = [(tree.root_node, False, None)]
    while stack:
        node, in_string, parent_type = stack.pop()
        start, end = node.start_byte, node.end_byte
        if end <= start or start < position:
            # MISSING nodes are zero-width; nothing in the source to emit
            continue

        if node.child_count and node.type not in _ATOMIC_NODES:
            nested = in_string or node.type in _STRING_NODES
            for child in reversed(node.children):
                stack.append((child, nested, node.type))
            continue

        emit_gap(start)
        raw = source[start:end]
        text = raw.decode("utf-8", errors="replace")
        kind = _classify_leaf(node, text, in_string, parent_type, previous)
        token = emit(kind, raw)
        if kind not in (TokenKind.WHITESPACE, TokenKind.COMMENT):
            previous = token
        position = end

    emit_gap(len(source))
    logger.debug("tokenize: %d bytes -> %d tokens", len(source), len(tokens))
    return tokens
