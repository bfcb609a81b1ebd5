"""CLI entrypoint: ``mockpkg [options] <package> [<func> ...]``."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import load_config
from .errors import MockpkgError
from .logging import configure_logging, get_logger
from .pipeline import Pipeline
from .render import DEFAULT_PACKAGE, InterfaceDeclarationGenerator


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mockpkg",
        description="Synthesize an interface from the free functions of a Go package.",
    )
    parser.add_argument(
        "package",
        help="Directory or import path of the Go package to inspect.",
    )
    parser.add_argument(
        "functions",
        nargs="*",
        metavar="func",
        help="Functions to include (defaults to every exported free function).",
    )
    parser.add_argument(
        "--tags",
        default="",
        help="Space-separated list of extra build tags.",
    )
    parser.add_argument(
        "--outfile",
        type=Path,
        default=None,
        help="Write the interface declaration to this file instead of stdout.",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        default=None,
        help="Replace the output file if it already exists.",
    )
    parser.add_argument(
        "--package",
        dest="output_package",
        default=None,
        help=f"Package clause of the generated file (default: {DEFAULT_PACKAGE}).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("."),
        help="Path to .mockpkg.yml or the directory containing it.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for mockpkg."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))
    logger = get_logger("cli")

    try:
        config = load_config(args.config)
        context = config.build_context().with_tags(*args.tags.split())
        outfile = args.outfile or config.output.outfile
        overwrite = args.overwrite if args.overwrite is not None else config.output.overwrite
        package = args.output_package or config.output.package or DEFAULT_PACKAGE

        if outfile is not None and outfile.exists() and not overwrite:
            parser.exit(1, f"{outfile} already exists; pass --overwrite to replace it\n")

        iface = Pipeline(args.package, args.functions, context).run()
        source = InterfaceDeclarationGenerator().generate(iface, package=package)
    except MockpkgError as exc:
        parser.exit(1, f"mockpkg: {exc}\n")

    if outfile is None:
        sys.stdout.write(source)
        return
    try:
        outfile.parent.mkdir(parents=True, exist_ok=True)
        outfile.write_text(source, encoding="utf-8")
    except OSError as exc:
        parser.exit(1, f"mockpkg: cannot write {outfile}: {exc}\n")
    logger.info("Wrote interface %s to %s", iface.name, outfile)


if __name__ == "__main__":
    main(sys.argv[1:])
