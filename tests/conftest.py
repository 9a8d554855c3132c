import re

import pytest

from ptags.modules.core.lexer import Token, TokenKind

_KEYWORDS = {
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
_RESERVED = {
    "abstract", "array", "echo", "else", "extends", "final", "if", "implements",
    "int", "new", "return", "self", "static", "string", "use",
}

_TOKEN_RE = re.compile(
    r"""
      (?P<open><\?php)
    | (?P<ws>\s+)
    | (?P<comment>//[^\n]*|/\*.*?\*/)
    | (?P<variable>\$[A-Za-z_]\w*)
    | (?P<word>[A-Za-z_]\w*)
    | (?P<literal>\d+|'[^']*')
    | (?P<sep>\\)
    | (?P<symbol>\?->|::|->|=>|.)
    """,
    re.VERBOSE | re.DOTALL,
)


def lex_php(source) -> list[Token]:
    """Small stand-in tokenizer so parser tests do not need the grammar."""
    if isinstance(source, bytes):
        source = source.decode("utf-8")
    tokens = []
    line = 1
    for m in _TOKEN_RE.finditer(source):
        text = m.group()
        group = m.lastgroup
        if group == "word":
            kind = _KEYWORDS.get(text.lower())
            if kind is None:
                kind = TokenKind.KEYWORD if text.lower() in _RESERVED else TokenKind.NAME
        else:
            kind = {
                "open": TokenKind.LITERAL,
                "ws": TokenKind.WHITESPACE,
                "comment": TokenKind.COMMENT,
                "variable": TokenKind.VARIABLE,
                "literal": TokenKind.LITERAL,
                "sep": TokenKind.NS_SEPARATOR,
                "symbol": TokenKind.SYMBOL,
            }[group]
        tokens.append(Token(kind, text, line))
        line += text.count("\n")
    return tokens


@pytest.fixture
def php_tokens():
    return lex_php
