"""
Structured errors for ptags.

Error codes that callers can handle programmatically:
- PTAGS_ERR_SOURCE: Source file missing or unreadable
- PTAGS_ERR_CACHE: Cache directory or entry could not be written
- PTAGS_ERR_DIRECTORY: Directory given where a file was expected
- PTAGS_ERR_LEXER: PHP grammar for tree-sitter is not installed
- PTAGS_ERR_INTERNAL: Anything else
"""

from dataclasses import dataclass, field
from typing import Any


# Error codes
ERR_SOURCE = "PTAGS_ERR_SOURCE"
ERR_CACHE = "PTAGS_ERR_CACHE"
ERR_DIRECTORY = "PTAGS_ERR_DIRECTORY"
ERR_LEXER = "PTAGS_ERR_LEXER"
ERR_INTERNAL = "PTAGS_ERR_INTERNAL"


@dataclass
class PtagsErrorInfo:
    """Structured error response for machine parsing."""

    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict."""
        return {
            "error": True,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


def make_error(code: str, message: str, **details) -> dict:
    """Create a structured error response dict."""
    return PtagsErrorInfo(code=code, message=message, details=details).to_dict()


class PtagsError(Exception):
    """Base class for fatal ptags failures."""

    code = ERR_INTERNAL

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return make_error(self.code, self.message, **self.details)


class SourceReadError(PtagsError):
    code = ERR_SOURCE

    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot read {path}: {reason}", file=path)
        self.path = path


class CacheWriteError(PtagsError):
    code = ERR_CACHE

    def __init__(self, path: str, reason: str):
        super().__init__(f"cannot write cache entry {path}: {reason}", file=path)
        self.path = path


class DirectoryInputError(PtagsError):
    code = ERR_DIRECTORY

    def __init__(self, path: str):
        super().__init__(f"{path} is a directory, maybe try -R?", file=path, hint="-R")
        self.path = path


class LexerUnavailableError(PtagsError):
    code = ERR_LEXER

    def __init__(self, reason: str = "tree-sitter PHP grammar is not installed"):
        super().__init__(reason, hint="pip install tree-sitter tree-sitter-php")
