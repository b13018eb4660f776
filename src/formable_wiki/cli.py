"""CLI for turning formable/mission messages into wiki pages.

Commands:
    formable-wiki parse      Parse a message and print the result as JSON
    formable-wiki generate   Render the full wiki page
    formable-wiki tagline    Render only the tagline sentence
    formable-wiki inspect    Read a rendered page back into fields
    formable-wiki icon       Look up a modifier icon thumbnail

Pipeline:
    parse → (edit) → generate

Examples:
    # Parse a message saved from chat
    formable-wiki parse message.txt

    # Render a mission page from stdin with an explicit continent
    formable-wiki generate - --kind mission --continent Europe < message.txt

    # Override fields and write the page to a file
    formable-wiki generate message.txt --set population=1.2M --set demonym=Rus -o page.wiki
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
import traceback
from datetime import datetime
from pathlib import Path

from formable_wiki.config import load_config
from formable_wiki.extraction import parse_message
from formable_wiki.lookup import ContinentLookup, ContributorLookup, ThumbnailLookup, describe_thumbnail
from formable_wiki.lookup.continent import static_continent
from formable_wiki.parsers.types import ParseFailure, TemplateData, edit_record
from formable_wiki.render import generate_document, read_document, record_from_document
from formable_wiki.render.template import group_tiles_by_country, resolve_continent_text, tile_hint
from formable_wiki.render.tagline import render_tagline

# Exit codes
EXIT_OK = 0
EXIT_PARSE_FAILURE = 1
EXIT_USAGE = 2

# =============================================================================
# LOGGING SETUP
# =============================================================================

# Module-level logger
logger = logging.getLogger("formable_wiki")


def _setup_logging(log_dir: Path | None = None, verbose: bool = False) -> Path:
    """Configure logging with file and console handlers.

    Args:
        log_dir: Directory for log files (default: from config)
        verbose: If True, set console to DEBUG level

    Returns:
        Path to the log file
    """
    if log_dir is None:
        log_dir = Path(load_config().log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Create timestamped log file
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = log_dir / f"formable_wiki_{timestamp}.log"

    logger.setLevel(logging.DEBUG)

    # File handler - captures everything with full detail
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    # Console handler - less verbose unless --verbose flag
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    # Clear existing handlers so repeated runs in one process do not stack them
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    logger.info(f"Logging initialized - log file: {log_file}")
    return log_file


def _log_exception(msg: str, exc: Exception) -> None:
    """Log an exception with full traceback to file.

    Args:
        msg: Context message describing what failed
        exc: The exception that was raised
    """
    logger.error(f"{msg}: {type(exc).__name__}: {exc}")
    logger.debug(f"Traceback:\n{traceback.format_exc()}")


def _create_parser() -> argparse.ArgumentParser:
    """Create argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="formable-wiki",
        description="Turn formable/mission messages into wiki pages",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging on stderr")
    parser.add_argument("--log-dir", type=Path, default=None, help="Directory for log files")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    def add_input(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("input", help="Message file, or - to read stdin")
        sub.add_argument(
            "--kind",
            choices=["formable", "mission"],
            default="formable",
            help="Document kind (default: formable)",
        )

    # =========================================================================
    # PARSE SUBCOMMAND
    # =========================================================================
    parse_parser = subparsers.add_parser("parse", help="Parse a message and print JSON")
    add_input(parse_parser)

    # =========================================================================
    # GENERATE / TAGLINE SUBCOMMANDS
    # =========================================================================
    generate_parser = subparsers.add_parser("generate", help="Render the full wiki page")
    tagline_parser = subparsers.add_parser("tagline", help="Render only the tagline")
    for sub in (generate_parser, tagline_parser):
        add_input(sub)
        sub.add_argument("--continent", default=None, help="Explicit continent (default: detect)")
        sub.add_argument(
            "--form-type",
            choices=["regular", "releasable"],
            default=None,
            help="Override the detected form type",
        )
        sub.add_argument(
            "--set",
            dest="overrides",
            action="append",
            default=[],
            metavar="KEY=VALUE",
            help="Override a record field (repeatable)",
        )
        sub.add_argument("--offline", action="store_true", help="Never call external services")
        sub.add_argument("--seed", type=int, default=None, help="Seed for tagline phrasing")

    generate_parser.add_argument(
        "--resolve-contributors",
        action="store_true",
        help="Replace contributor ids with Discord display names",
    )
    generate_parser.add_argument("-o", "--output", type=Path, default=None, help="Write markup to file")

    # =========================================================================
    # INSPECT SUBCOMMAND
    # =========================================================================
    inspect_parser = subparsers.add_parser("inspect", help="Read a rendered page back into fields")
    inspect_parser.add_argument("input", help="Page file, or - to read stdin")

    # =========================================================================
    # ICON SUBCOMMAND
    # =========================================================================
    icon_parser = subparsers.add_parser("icon", help="Look up a modifier icon thumbnail")
    icon_parser.add_argument("asset_id", help="Numeric asset id")

    return parser


# =============================================================================
# HELPERS
# =============================================================================


def _read_input(source: str) -> str:
    """Read a file, or stdin for ``-``."""
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _parse_overrides(pairs: list[str]) -> dict[str, str]:
    """Turn ``key=value`` strings into record overrides.

    Raises:
        ValueError: If a pair has no ``=``.
    """
    overrides: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        key = key.strip()
        if not sep:
            raise ValueError(f"Expected KEY=VALUE, got {pair!r}")
        overrides[key] = value.strip()
    return overrides


def _parse_or_report(text: str, kind: str) -> TemplateData | None:
    result = parse_message(text, kind)
    if isinstance(result, ParseFailure):
        print(f"Error ({result.kind}): {result.error}", file=sys.stderr)
        return None
    for warning in result.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    return result.data


def _edited_record(record: TemplateData, args: argparse.Namespace) -> TemplateData:
    changes: dict[str, str] = _parse_overrides(args.overrides)
    if args.continent:
        changes["continent"] = args.continent
    if args.form_type:
        changes["form_type"] = args.form_type
    return edit_record(record, changes)


# =============================================================================
# COMMANDS
# =============================================================================


def _run_parse(args: argparse.Namespace) -> int:
    text = _read_input(args.input)
    result = parse_message(text, args.kind)
    print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    return EXIT_OK if result.success else EXIT_PARSE_FAILURE


def _run_generate(args: argparse.Namespace) -> int:
    record = _parse_or_report(_read_input(args.input), args.kind)
    if record is None:
        return EXIT_PARSE_FAILURE
    record = _edited_record(record, args)

    continent_lookup = static_continent if args.offline else ContinentLookup()
    contributor_resolver = None
    if args.resolve_contributors and not args.offline:
        contributor_resolver = ContributorLookup().display_name

    rng = random.Random(args.seed) if args.seed is not None else None
    document = generate_document(
        record,
        args.kind,
        continent_lookup=continent_lookup,
        contributor_resolver=contributor_resolver,
        rng=rng,
    )

    if args.output is not None:
        args.output.write_text(document.markup + "\n", encoding="utf-8")
        print(f"Wrote {args.output}")
    else:
        print(document.markup)
    return EXIT_OK


def _run_tagline(args: argparse.Namespace) -> int:
    record = _parse_or_report(_read_input(args.input), args.kind)
    if record is None:
        return EXIT_PARSE_FAILURE
    record = _edited_record(record, args)

    continent_lookup = static_continent if args.offline else ContinentLookup()
    continent_text = resolve_continent_text(record, continent_lookup)
    hint = tile_hint(group_tiles_by_country(record.required_tiles))
    rng = random.Random(args.seed) if args.seed is not None else None
    print(render_tagline(record, args.kind, hint, continent_text, rng=rng))
    return EXIT_OK


def _run_inspect(args: argparse.Namespace) -> int:
    markup = _read_input(args.input)
    document = read_document(markup)
    if document is None:
        print("Error: no ConsideredFormable or ConsideredMission template found", file=sys.stderr)
        return EXIT_PARSE_FAILURE
    record = record_from_document(markup)
    output = {
        "kind": document.kind,
        "template": document.template_name,
        "params": document.params,
        "description": document.description,
        "tagline": document.tagline,
        "record": record.to_dict() if record is not None else None,
    }
    print(json.dumps(output, indent=2, ensure_ascii=False))
    return EXIT_OK


def _run_icon(args: argparse.Namespace) -> int:
    result = ThumbnailLookup().lookup(args.asset_id)
    print(describe_thumbnail(result))
    return EXIT_OK if result.status == "ok" else EXIT_PARSE_FAILURE


COMMANDS = {
    "parse": _run_parse,
    "generate": _run_generate,
    "tagline": _run_tagline,
    "inspect": _run_inspect,
    "icon": _run_icon,
}


def main(argv: list[str] | None = None) -> None:
    """Run the formable-wiki CLI."""
    parser = _create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(EXIT_USAGE)

    _setup_logging(args.log_dir, args.verbose)
    logger.debug(f"Running {args.command} with {vars(args)}")

    try:
        exit_code = COMMANDS[args.command](args)
    except (OSError, ValueError) as e:
        _log_exception(f"{args.command} failed", e)
        print(f"Error: {e}", file=sys.stderr)
        exit_code = EXIT_USAGE
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
