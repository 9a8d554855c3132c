"""Forward-only token cursor that can record the text it walks over."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from .lexer import Token


class TokenCursor:
    """Walk a token sequence one token at a time.

    While collecting, every consumed token's text is appended to a snippet.
    Collection stops by itself once a consumed token contains a newline, so a
    snippet never extends past the first line break it meets.
    """

    def __init__(self, tokens: Sequence[Token]):
        self._tokens = list(tokens)
        self._pos = 0
        self._collecting = False
        self._snippet: list[str] = []

    @property
    def current(self) -> Token | None:
        if self._pos < len(self._tokens):
            return self._tokens[self._pos]
        return None

    @property
    def collecting(self) -> bool:
        return self._collecting

    def advance(self) -> Token | None:
        if self._pos < len(self._tokens):
            self._pos += 1
        tok = self.current
        if self._collecting and tok is not None:
            self._snippet.append(tok.text)
            if "\n" in tok.text:
                self._collecting = False
        return tok

    def start_collect(self) -> None:
        tok = self.current
        self._snippet = [tok.text] if tok is not None else []
        self._collecting = True

    def stop_collect(self) -> str:
        self._collecting = False
        return "".join(self._snippet)

    def skip_to_one_of(self, literals: Iterable[str]) -> Token | None:
        wanted = set(literals)
        tok = self.advance()
        while tok is not None:
            if tok.text in wanted:
                return tok
            tok = self.advance()
        return None
