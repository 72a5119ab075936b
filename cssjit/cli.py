"""CLI entrypoints for cssjit commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import EMIT_MODES, ConfigError, parse_option_pairs
from .logging import configure_logging
from .orchestrator import Orchestrator


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


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    parser.add_argument(
        "--set",
        dest="options",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a host option such as pattern_override or file_extension_filter.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cssjit",
        description="Collect CSS class names from C# and Razor sources and generate accessors.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--trace",
        action="store_true",
        help="Log every call site that did not yield a class name.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Write the generated class-name sources for a project.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_common_options(generate_parser)
    generate_parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for generated sources (relative paths resolve against the project root).",
    )
    generate_parser.add_argument(
        "--mode",
        choices=EMIT_MODES,
        default=None,
        help="Emit one combined accessor or one accessor per scanner category.",
    )
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the generated sources without writing them or any cache.",
    )

    list_parser = subparsers.add_parser(
        "list",
        help="Print every discovered class name, one per line.",
    )
    _add_verbose_option(list_parser, suppress_default=True)
    _add_common_options(list_parser)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for cssjit commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), trace=bool(args.trace))

    try:
        options = parse_option_pairs(args.options)
    except ConfigError as exc:
        parser.error(str(exc))

    orchestrator = Orchestrator()

    if args.command == "generate":
        dry_run = bool(getattr(args, "dry_run", False))
        try:
            outcome = orchestrator.run(
                args.path,
                output_dir=args.output_dir,
                mode=args.mode,
                options=options,
                dry_run=dry_run,
            )
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except ConfigError as exc:
            parser.exit(1, f"cssjit generate failed: {exc}\n")
        except RuntimeError as exc:
            parser.exit(1, f"cssjit generate failed: {exc}\nRun with --verbose for more details.\n")
        if outcome.class_set is None:
            print("No partial MonorailCSS class found; nothing generated")
        elif dry_run:
            for artifact in outcome.artifacts:
                print(f"// {artifact.name} (dry-run)")
                print(artifact.text)
        elif outcome.written:
            for path in outcome.written:
                print(f"Wrote {_relativize(path)}")
        else:
            print("Generated sources already up to date")
        for path in outcome.removed:
            print(f"Removed {_relativize(path)}")
    elif args.command == "list":
        try:
            classes = orchestrator.collect(args.path, options=options)
        except (FileNotFoundError, NotADirectoryError) as exc:
            parser.exit(1, f"{exc}\n")
        except ConfigError as exc:
            parser.exit(1, f"cssjit list failed: {exc}\n")
        except RuntimeError as exc:
            parser.exit(1, f"cssjit list failed: {exc}\nRun with --verbose for more details.\n")
        for value in classes:
            print(value)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
