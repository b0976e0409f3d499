"""zs CLI: zs build / zs watch / zs generate / zs var.

Entry point for the ``zs`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the zs CLI."""
    parser = argparse.ArgumentParser(
        prog="zs",
        description="Extensible static site generator.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument("--root", default=".", help="Site root directory")
    parser.add_argument("-C", "--config", type=Path, help="Config file (yaml or toml)")
    parser.add_argument(
        "-p", "--production", action="store_true", default=None, help="Production mode",
    )
    parser.add_argument("-t", "--title", help="Site title")
    parser.add_argument("-d", "--description", help="Site description")
    parser.add_argument("-k", "--keywords", help="Site keywords")
    parser.add_argument(
        "-v", "--vars", action="append", metavar="NAME=VALUE",
        help="Extra global variables (comma-separated, repeatable)",
    )
    parser.add_argument("-o", "--opening-delim", help="Macro opening delimiter")
    parser.add_argument("-c", "--closing-delim", help="Macro closing delimiter")
    parser.add_argument(
        "-e", "--extensions", action="append", metavar="NAME",
        help="Markdown extensions (comma-separated, repeatable)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # zs build
    build_parser = subparsers.add_parser(
        "build",
        help="Build the site, or one file to stdout",
    )
    build_parser.add_argument("file", nargs="?", help="Single file to build")

    # zs watch
    subparsers.add_parser(
        "watch",
        help="Rebuild changed files until interrupted",
    )

    # zs generate
    subparsers.add_parser(
        "generate",
        aliases=["gen"],
        help="Render markdown from stdin to stdout",
    )

    # zs var
    var_parser = subparsers.add_parser(
        "var",
        aliases=["vars"],
        help="Print the variables of a file",
    )
    var_parser.add_argument("file", help="Source file")
    var_parser.add_argument("names", nargs="*", help="Only print these variables")

    return parser


def _get_version() -> str:
    """Get the package version."""
    from zs import __version__

    return __version__


def _overrides(args: argparse.Namespace) -> dict[str, object]:
    """Config overrides from global options; unset options stay None."""
    return {
        "config_file": args.config,
        "production": args.production,
        "title": args.title,
        "description": args.description,
        "keywords": args.keywords,
        "vars": _split_commas(args.vars),
        "opening_delim": args.opening_delim,
        "closing_delim": args.closing_delim,
        "extensions": _split_commas(args.extensions),
    }


def _split_commas(values: list[str] | None) -> list[str] | None:
    """Flatten repeated list options, each of which may hold ``a,b,c``."""
    if values is None:
        return None
    return [item.strip() for value in values for item in value.split(",") if item.strip()]


def format_vars(vars: dict[str, str], names: list[str] | None = None) -> str:
    """Format variables for ``zs var``.

    Without ``names`` every variable is listed as ``name:value`` sorted by
    name.  With ``names`` only the values are listed, one per line, and a
    missing name yields an empty line.
    """
    if names:
        return "".join(f"{vars.get(name.lower(), '')}\n" for name in names)
    return "".join(f"{name}:{vars[name]}\n" for name in sorted(vars))


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from zs.app import build, build_file, generate, resolve_vars, watch

    overrides = _overrides(args)
    try:
        if args.command == "build" and args.file is None:
            result = build(root=args.root, **overrides)
            if not result.ok:
                sys.exit(1)
        elif args.command == "build":
            build_file(args.file, sys.stdout.buffer, root=args.root, **overrides)
            sys.stdout.flush()
        elif args.command == "watch":
            watch(root=args.root, **overrides)
        elif args.command in ("generate", "gen"):
            generate(sys.stdin.buffer, sys.stdout.buffer, root=args.root, **overrides)
            sys.stdout.flush()
        elif args.command in ("var", "vars"):
            vars = resolve_vars(args.file, root=args.root, **overrides)
            sys.stdout.write(format_vars(vars, args.names))
    except Exception as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
