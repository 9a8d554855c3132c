"""Core tag extraction: lexer adapter, declaration parser, cache and index."""

from .cache import CacheRecord, CacheStore
from .driver import TagGenerator, resolve_source
from .errors import (
    CacheWriteError,
    DirectoryInputError,
    LexerUnavailableError,
    PtagsError,
    SourceReadError,
)
from .lexer import Token, TokenKind, tokenize
from .parser import DeclarationParser, parse_tokens
from .scope import ScopeFrame, ScopeKind, ScopeStack
from .tags import Tag, TagIndex, TagKind, relative_path, search_command
from .workspace import WorkspaceConfig, collect_files, load_workspace_config

__all__ = [
    "CacheRecord",
    "CacheStore",
    "CacheWriteError",
    "DeclarationParser",
    "DirectoryInputError",
    "LexerUnavailableError",
    "PtagsError",
    "ScopeFrame",
    "ScopeKind",
    "ScopeStack",
    "SourceReadError",
    "Tag",
    "TagGenerator",
    "TagIndex",
    "TagKind",
    "Token",
    "TokenKind",
    "WorkspaceConfig",
    "collect_files",
    "load_workspace_config",
    "parse_tokens",
    "relative_path",
    "resolve_source",
    "search_command",
    "tokenize",
]
