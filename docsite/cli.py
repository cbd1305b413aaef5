"""CLI entrypoints for docsite commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError
from .loader import DocletLoadError
from .logging import configure_logging
from .orchestrator import Orchestrator
from .pages import DuplicatePageError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsite",
        description="Render a static HTML documentation site from parsed doclets.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only report warnings and errors.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write a debug-level log of the run to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    build_parser = subparsers.add_parser(
        "build",
        help="Publish the HTML site for a doclet dump.",
    )
    _add_verbose_option(build_parser, suppress_default=True)
    build_parser.add_argument(
        "doclets",
        help="Path to the JSON doclet dump (as written by `jsdoc -X`).",
    )
    build_parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Configuration file or directory (defaults to the current directory).",
    )
    build_parser.add_argument(
        "-d",
        "--destination",
        default=None,
        help="Output directory, overriding opts.destination.",
    )
    build_parser.add_argument(
        "-u",
        "--tutorials",
        default=None,
        help="Directory containing tutorials, overriding opts.tutorials.",
    )
    build_parser.add_argument(
        "-R",
        "--readme",
        default=None,
        help="Readme rendered on the main page, overriding opts.readme.",
    )
    build_parser.add_argument(
        "-e",
        "--encoding",
        default=None,
        help="Encoding used to read source files, tutorials and the readme.",
    )
    build_parser.add_argument(
        "--template",
        default=None,
        help="Template directory whose tmpl/ and static/ replace the built-in ones.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service exposing the publish operation.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docsite commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        verbose=bool(args.verbose),
        quiet=args.quiet,
        log_file=args.log_file,
    )

    if args.command == "build":
        orchestrator = Orchestrator()
        try:
            result = orchestrator.run_build(
                args.doclets,
                args.config,
                destination=args.destination,
                tutorials_path=args.tutorials,
                readme_path=args.readme,
                template_path=args.template,
                encoding=args.encoding,
            )
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except (ConfigError, DocletLoadError, DuplicatePageError) as exc:
            parser.exit(1, f"docsite build failed: {exc}\nRun with --verbose for more details.\n")
        print(f"Site written to {_relativize(result.outdir)} ({len(result.pages)} pages)")
    elif args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
