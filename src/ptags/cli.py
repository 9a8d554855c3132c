#!/usr/bin/env python3
"""
ptags CLI - generate an editor tags file for PHP sources.

Usage:
    ptags file.php other.php             Write ./tags for the given files
    ptags -R src/                        Recurse into directories
    ptags -f - file.php                  Print tags to stdout
"""
import argparse
import json
import logging
import os
import sys
import tempfile
from pathlib import Path

from . import __version__
from .modules.core.cache import CACHE_DIR_ENV, CacheStore
from .modules.core.driver import TagGenerator
from .modules.core.errors import ERR_INTERNAL, PtagsError, make_error
from .modules.core.workspace import CONFIG_FILENAME, collect_files, load_workspace_config

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ptags",
        description="Generate a sorted tags file for PHP namespaces, classes, functions and properties",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Version: %(prog)s """ + __version__ + """

Examples:
    ptags -R .                           # Index the current project into ./tags
    ptags -f build/tags -R src lib       # Write tags elsewhere (paths stay relative to it)
    ptags -f - src/Foo.php               # Print to stdout

Cache:
    Results are cached per file under ~/.ptags (override with $""" + CACHE_DIR_ENV + """).
    A file is re-parsed only when it is newer than its cache entry.
    Use --no-cache to always re-parse.

Configuration:
    A """ + CONFIG_FILENAME + """ file in the working directory may set
    "extensions" and "excludePatterns" for -R scans.
        """,
    )

    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-f", "--file",
        dest="outfile",
        default="tags",
        help="Output file, or '-' for stdout (default: tags)",
    )
    parser.add_argument(
        "-R", "--recurse",
        action="store_true",
        help="Recurse into directories",
    )
    parser.add_argument(
        "--base",
        default=None,
        help="Directory that tag paths are made relative to "
             "(default: the output file's directory, or the current directory for stdout)",
    )
    parser.add_argument(
        "--cache-dir",
        default=None,
        help=f"Cache directory (default: ${CACHE_DIR_ENV} or ~/.ptags)",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Neither read nor write the per-file cache",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log cache and parse activity to stderr",
    )
    parser.add_argument(
        "--error-format",
        choices=["text", "json"],
        default="text",
        help="How fatal errors are reported on stderr (default: text)",
    )
    parser.add_argument("paths", nargs="*", help="Files, or directories with -R")
    return parser


def _default_base(outfile: str) -> Path:
    if outfile == "-":
        return Path.cwd().resolve()
    return Path(outfile).resolve().parent


def _write_atomic(path: Path, text: str) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except OSError:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _report_error(args: argparse.Namespace, error: dict, message: str) -> None:
    if args.error_format == "json":
        print(json.dumps(error, separators=(",", ":")), file=sys.stderr)
    else:
        print(f"Error: {message}", file=sys.stderr)


def run(args: argparse.Namespace) -> int:
    paths = args.paths or (["."] if args.recurse else [])
    config = load_workspace_config(Path.cwd())
    files = collect_files(paths, recursive=args.recurse, config=config)

    cache = CacheStore(
        root=Path(args.cache_dir) if args.cache_dir else None,
        enabled=not args.no_cache,
    )
    generator = TagGenerator(cache=cache)
    generator.process_files(files)

    base = Path(args.base).resolve() if args.base else _default_base(args.outfile)
    output = generator.render(base)
    logger.debug("cli: %d tags, cache %s", len(generator.index), cache.stats)

    if args.outfile == "-":
        sys.stdout.write(output)
    else:
        _write_atomic(Path(args.outfile), output)
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.paths and not args.recurse:
        parser.error("no input files (pass files, or -R to scan directories)")

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        sys.exit(run(args))
    except PtagsError as e:
        _report_error(args, e.to_dict(), str(e))
        sys.exit(1)
    except OSError as e:
        _report_error(args, make_error(ERR_INTERNAL, str(e)), str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
