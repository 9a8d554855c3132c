"""ptags modules.

Modules:
- core: PHP declaration parsing, tag index and per-file cache
"""

# Lazy import keeps `import ptags.modules` cheap
def __getattr__(name: str):
    if name == "core":
        from . import core
        return core
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

__all__ = ["core"]
