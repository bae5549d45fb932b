"""
Command Line Entry Point

Usage:
    httpstat [-X METHOD] [-H "Name: value"] [-d DATA] [-f FORMAT] URL
"""

import argparse
import logging
from typing import Optional, Sequence

from httpstat import __version__
from httpstat.client import measure
from httpstat.config import get_settings
from httpstat.errors import HttpStatError
from httpstat.formatting import FORMATS, render
from httpstat.logging_config import setup_logging

logger = logging.getLogger(__name__)


def parse_header(value: str) -> tuple[str, str]:
    """Parse a ``Name: value`` header argument."""
    name, sep, header_value = value.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"invalid header {value!r}, expected 'Name: value'")
    if not value.isascii():
        raise argparse.ArgumentTypeError(f"invalid header {value!r}, only ASCII characters are allowed")
    return name.strip(), header_value.strip()


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="httpstat",
        description="Show the latency breakdown of a single HTTP request",
    )
    parser.add_argument("url", help="URL to request")
    parser.add_argument(
        "-X", "--method",
        default="GET",
        help="HTTP method (default: GET)",
    )
    parser.add_argument(
        "-H", "--header",
        dest="headers",
        action="append",
        type=parse_header,
        default=[],
        metavar="'NAME: VALUE'",
        help="Extra request header, may be repeated",
    )
    parser.add_argument(
        "-d", "--data",
        help="Request body",
    )
    parser.add_argument(
        "-f", "--format",
        choices=FORMATS,
        default=settings.OUTPUT_FORMAT,
        help=f"Report format (default: {settings.OUTPUT_FORMAT})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.HTTP_TIMEOUT,
        help=f"Request timeout in seconds (default: {settings.HTTP_TIMEOUT})",
    )
    parser.add_argument(
        "-k", "--insecure",
        action="store_true",
        help="Skip TLS certificate verification",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point"""
    args = build_parser().parse_args(argv)
    setup_logging(debug=True if args.verbose else None)

    try:
        result = measure(
            args.url,
            method=args.method.upper(),
            headers=dict(args.headers),
            content=args.data.encode() if args.data is not None else None,
            timeout=args.timeout,
            verify=False if args.insecure else None,
        )
    except HttpStatError as e:
        logger.error(e.message)
        return 1

    print(f"{result.http_version} {result.status_code}")
    print(render(result.report, args.format))
    return 0
