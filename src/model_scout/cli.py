"""model-scout command-line interface."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from model_scout import __version__
from model_scout.types import (
    DEFAULT_CACHE_DIR,
    DEFAULT_HOST,
    DEFAULT_NAMESPACE,
    DEFAULT_PORT,
    CatalogConfig,
)

EXIT_BAD_INPUT = 2


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command is None:
        parser.print_help()
        return 0

    config = CatalogConfig(namespace=args.namespace, cache_dir=args.cache_dir)
    return args.handler(args, config)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="model-scout",
        description="Discover GGUF models and files, with an offline cache.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"model-scout {__version__}",
    )
    parser.add_argument(
        "--namespace",
        default=DEFAULT_NAMESPACE,
        help=f"Organization to browse  [default: {DEFAULT_NAMESPACE}]",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=DEFAULT_CACHE_DIR,
        help=f"Cache directory  [default: {DEFAULT_CACHE_DIR}]",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logging.",
    )

    sub = parser.add_subparsers(dest="command")

    # -- list ---------------------------------------------------------------
    list_parser = sub.add_parser("list", help="List models in the namespace.")
    list_parser.set_defaults(handler=_cmd_list)

    # -- files --------------------------------------------------------------
    files_parser = sub.add_parser("files", help="List .gguf files of a model.")
    files_parser.add_argument(
        "model",
        help="Repository id (owner/name) or Hugging Face URL.",
    )
    files_parser.set_defaults(handler=_cmd_files)

    # -- browse -------------------------------------------------------------
    browse_parser = sub.add_parser(
        "browse", help="Show local and remote models in one listing."
    )
    browse_parser.add_argument(
        "--local",
        action="append",
        default=[],
        metavar="NAME",
        help="A locally configured model name (repeatable).",
    )
    browse_parser.add_argument(
        "--downloaded",
        action="append",
        default=[],
        metavar="NAME",
        help="A previously downloaded model name (repeatable).",
    )
    browse_parser.set_defaults(handler=_cmd_browse)

    # -- serve --------------------------------------------------------------
    serve_parser = sub.add_parser("serve", help="Start the HTTP server.")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Server port  [default: {DEFAULT_PORT}]",
    )
    serve_parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Bind address  [default: {DEFAULT_HOST}]",
    )
    serve_parser.set_defaults(handler=_cmd_serve)

    # -- clear-cache --------------------------------------------------------
    clear_parser = sub.add_parser("clear-cache", help="Remove all cached listings.")
    clear_parser.set_defaults(handler=_cmd_clear_cache)

    return parser


# ---------------------------------------------------------------------------
# Advisory text
# ---------------------------------------------------------------------------

_SOURCE_NOTES = {
    "cache": "from cache",
    "live": "live from Hugging Face",
    "offline": "from offline cache (network unavailable)",
    "none": "nothing available",
}


def _describe_source(source: str, count: int, noun: str) -> str:
    if source == "none":
        return f"No {noun} found ({_SOURCE_NOTES['none']})."
    return f"Found {count} {noun} {_SOURCE_NOTES[source]}."


# ---------------------------------------------------------------------------
# Subcommand implementations
# ---------------------------------------------------------------------------


def _cmd_list(args: argparse.Namespace, config: CatalogConfig) -> int:
    """Print the catalog entries of the namespace."""
    from model_scout.catalog import build_resolver

    resolver = build_resolver(config)
    try:
        resolution = resolver.resolve_entries_detailed(config.namespace)
    finally:
        resolver.close()

    _log(_describe_source(resolution.source, len(resolution.items), "models"))
    for entry_id in resolution.items:
        print(entry_id)
    return 0


def _cmd_files(args: argparse.Namespace, config: CatalogConfig) -> int:
    """Print the ranked ``.gguf`` files of one model."""
    from model_scout.catalog import build_resolver
    from model_scout.inputs import is_direct_gguf_url, parse_repository_input

    entry_id = parse_repository_input(args.model)
    if entry_id is None:
        if is_direct_gguf_url(args.model):
            _log(f"{args.model!r} is a direct file URL, not a repository.")
        else:
            _log(f"Not a repository id or Hugging Face URL: {args.model!r}")
        return EXIT_BAD_INPUT

    resolver = build_resolver(config)
    try:
        resolution = resolver.resolve_files_detailed(entry_id)
    finally:
        resolver.close()

    _log(_describe_source(resolution.source, len(resolution.items), ".gguf files"))
    for f in resolution.items:
        print(f"  {f.display_name:<40s} {f.filename}")
        print(f"  {'':<40s} {f.description}")
    return 0


def _cmd_browse(args: argparse.Namespace, config: CatalogConfig) -> int:
    """Print local and remote models, local first."""
    from model_scout.catalog import build_resolver

    resolver = build_resolver(config)
    try:
        models = resolver.resolve_unified(args.local, args.downloaded)
    finally:
        resolver.close()

    if not models:
        _log("No models available.")
        return 0

    for m in models:
        if m.is_separator:
            print(m.name)
            continue
        params = f" ({m.parameter_count})" if m.parameter_count else ""
        print(f"  [{m.source_tag:<5s}] {m.name}{params}   {m.selection_id}")
    return 0


def _cmd_serve(args: argparse.Namespace, config: CatalogConfig) -> int:
    """Start the model-scout HTTP server."""
    import uvicorn

    from model_scout.catalog import build_resolver
    from model_scout.server import create_app

    resolver = build_resolver(config)
    app = create_app(resolver)

    print(f"model-scout v{__version__}")
    print(f"Namespace: {config.namespace}")
    print(f"Cache:     {config.cache_dir}")
    print(f"Server:    http://{args.host}:{args.port}")
    print()

    try:
        uvicorn.run(app, host=args.host, port=args.port, log_level="info")
    finally:
        resolver.close()
    return 0


def _cmd_clear_cache(args: argparse.Namespace, config: CatalogConfig) -> int:
    """Remove every cached listing."""
    from model_scout.catalog import build_resolver

    resolver = build_resolver(config)
    try:
        removed = resolver.clear_cache()
    finally:
        resolver.close()
    _log(f"Cache cleared ({removed} file(s) removed from {config.cache_dir}).")
    return 0


def _log(msg: str) -> None:
    print(msg, file=sys.stderr)


if __name__ == "__main__":
    sys.exit(main())
