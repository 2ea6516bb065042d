"""
Main Application Entry Point.

Command line front end of the exporter. Parses options, builds the search
query from the trailing arguments, and streams the export of one Sentry
project to stdout.

Usage:
    sentry-event-exporter --organization acme --project web [--events] \
        [--stats-period 14d] [--format csv|tsv|jsonl] [query terms ...]
"""

import argparse
import os
import re
import sys
from typing import BinaryIO, List, Optional, Sequence

from config import logger, settings
from export.errors import ExportError
from export.exporter import Exporter
from export.models import ExporterConfig
from renderers.base import ResultRenderer
from renderers.csv_renderer import CSVRenderer, EXCEL_CSV, TSV
from renderers.jsonl_renderer import JSONLinesRenderer
from trackers.errors import TrackerError


TAG_PATTERN = re.compile(r"^\w+:", re.ASCII)
WHITESPACE = " \t\n\r"


def quote_criterion(term: str) -> str:
    """
    Quote one search term for the issue query.

    A leading "tag:" prefix is kept as is; the remainder is wrapped in double
    quotes, with embedded double quotes backslash-escaped, when it contains
    whitespace.
    """
    prefix = ""
    match = TAG_PATTERN.match(term)
    if match:
        prefix = match.group(0)
        term = term[match.end():]
    if any(c in term for c in WHITESPACE):
        term = '"' + term.replace('"', '\\"') + '"'
    return prefix + term


def build_query(criteria: Sequence[str]) -> Optional[str]:
    """Join quoted search terms with spaces; None when there are no terms."""
    if not criteria:
        return None
    return " ".join(quote_criterion(c) for c in criteria)


def build_parser(prog: Optional[str] = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=prog,
        description="Export Sentry issues (and optionally their events) as CSV.",
    )
    parser.add_argument(
        "--authtoken",
        default="",
        help="Sentry authentication token (get it at "
        "https://sentry.io/settings/account/api/auth-tokens/ ); "
        "defaults to $SENTRY_AUTHTOKEN",
    )
    parser.add_argument("--endpoint", default="", help="Sentry endpoint")
    parser.add_argument("--organization", default="", help="organization")
    parser.add_argument("--project", default="", help="project")
    parser.add_argument(
        "--events", action="store_true", help="include events in the result"
    )
    parser.add_argument(
        "--stats-period", default="", help="time window of the issues, e.g. 24h or 14d"
    )
    parser.add_argument(
        "--format",
        choices=("csv", "tsv", "jsonl"),
        default="csv",
        help="output format (default: csv)",
    )
    parser.add_argument("criteria", nargs="*", help="search query terms")
    return parser


def config_from_args(args: argparse.Namespace) -> ExporterConfig:
    """Build the export configuration, falling back to settings for credentials.

    Raises:
        ConfigurationError: If a required option is missing.
    """
    auth_token = args.authtoken
    if not auth_token and settings.sentry_authtoken is not None:
        auth_token = settings.sentry_authtoken.get_secret_value()
    return ExporterConfig.from_options(
        auth_token=auth_token,
        organization=args.organization,
        project=args.project,
        endpoint=args.endpoint or settings.sentry_endpoint,
        stats_period=args.stats_period,
        query=build_query(args.criteria),
        include_events=args.events,
    )


def make_renderer(name: str, out: BinaryIO) -> ResultRenderer:
    if name == "jsonl":
        return JSONLinesRenderer(out)
    return CSVRenderer(out, TSV if name == "tsv" else EXCEL_CSV)


class FlushingWriter:
    """Flushes the wrapped buffered stream after every write.

    Renderers write one record per call, so each row reaches the terminal as
    soon as it is rendered while the buffered stream handles short writes.
    """

    def __init__(self, stream: BinaryIO):
        self.stream = stream

    def write(self, data: bytes) -> int:
        written = self.stream.write(data)
        self.stream.flush()
        return written

    def flush(self) -> None:
        self.stream.flush()


def buffer_if_not_tty(stream: BinaryIO) -> BinaryIO:
    """Flush every record on a terminal, keep output buffered otherwise."""
    if stream.isatty():
        return FlushingWriter(stream)
    return stream


def bail(prog: str, message: str) -> int:
    print(f"{prog}: {message}", file=sys.stderr)
    return 1


def main(argv: Optional[List[str]] = None, out: Optional[BinaryIO] = None) -> int:
    """
    Execute the command line workflow.

    Args:
        argv (Optional[List[str]]): Arguments without the program name.
        out (Optional[BinaryIO]): Output sink; stdout when None.

    Returns:
        int: Process exit status.
    """
    prog = os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "sentry-event-exporter"
    args = build_parser(prog).parse_args(argv)

    try:
        config = config_from_args(args)
    except ExportError as e:
        return bail(prog, str(e))

    sink = out if out is not None else buffer_if_not_tty(sys.stdout.buffer)
    status = 0
    exporter = None
    try:
        exporter = Exporter.create(
            config, make_renderer(args.format, sink), timeout=settings.request_timeout
        )
        exporter.export()
    except (ExportError, TrackerError) as e:
        status = bail(prog, str(e))
    finally:
        if exporter is not None:
            exporter.client.close()

    try:
        sink.flush()
    except OSError as e:
        # an export error already reported takes precedence
        if status == 0:
            status = bail(prog, f"failed to flush output: {e}")

    if status == 0:
        logger.info("application finished", rows=exporter.rows_rendered)
    return status


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
