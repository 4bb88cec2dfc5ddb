"""Command-line interface for i2p-base64.

Provides subcommands:
  encode - Encode bytes to I2P base64
  decode - Decode I2P base64 back to bytes

Input is read from stdin unless -f/--file or -s/--string is given; output
goes to stdout unless -o/--output is given. Encoded text may start with
"-", so pass it attached to the option: --string=-~8= or -s-~8=.

Exit codes:
    0 - Success
    1 - Malformed encoded input
    2 - Usage error (reported by argparse)
    3 - Invalid option value or I/O failure
"""

import argparse
import contextlib
import io
import logging
import os
import sys
from pathlib import Path

from i2p_base64.codec import GROUP_BYTES, GROUP_CHARS, decode_stream, encode_stream
from i2p_base64.errors import DecodeError, StreamError

logger = logging.getLogger(__name__)

CHUNK_GROUPS_ENV = "I2P_BASE64_CHUNK_GROUPS"
DEFAULT_CHUNK_GROUPS = 1024


def _resolve_chunk_groups(args) -> int:
    """Resolve how many groups to transform per read.

    Uses --chunk-groups, then the I2P_BASE64_CHUNK_GROUPS environment
    variable, then DEFAULT_CHUNK_GROUPS. Exits with code 3 on a value that
    is not a positive integer.
    """
    raw = getattr(args, "chunk_groups", None)
    origin = "--chunk-groups"
    if raw is None:
        raw = os.environ.get(CHUNK_GROUPS_ENV)
        origin = CHUNK_GROUPS_ENV
    if not raw:
        return DEFAULT_CHUNK_GROUPS

    try:
        groups = int(raw)
    except ValueError:
        groups = 0
    if groups <= 0:
        print(
            f"error: {origin} must be a positive integer, got {raw!r}",
            file=sys.stderr,
        )
        sys.exit(3)
    return groups


def _open_path(path: str, mode: str, **kwargs):
    """Open a file named on the command line, exiting with code 3 on failure."""
    resolved = Path(path).expanduser()
    try:
        return open(resolved, mode, **kwargs)
    except OSError as exc:
        print(f"error: cannot open {resolved}: {exc.strerror or exc}", file=sys.stderr)
        sys.exit(3)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


def cmd_encode(args) -> int:
    """Handle the 'encode' subcommand -- bytes in, I2P base64 text out."""
    groups = _resolve_chunk_groups(args)

    with contextlib.ExitStack() as stack:
        if args.string is not None:
            source = io.BytesIO(args.string.encode("utf-8"))
        elif args.file:
            source = stack.enter_context(_open_path(args.file, "rb"))
        else:
            source = sys.stdin.buffer

        if args.output:
            sink = stack.enter_context(
                _open_path(args.output, "w", encoding="ascii", newline="")
            )
        else:
            sink = sys.stdout

        try:
            encode_stream(source, sink, chunk_size=groups * GROUP_BYTES)
        except StreamError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 3
    return 0


def cmd_decode(args) -> int:
    """Handle the 'decode' subcommand -- I2P base64 text in, bytes out.

    Output written before a decode error is left in place, so a failed
    decode to --output leaves a partial file behind.
    """
    groups = _resolve_chunk_groups(args)

    with contextlib.ExitStack() as stack:
        # File and stdin are read as raw bytes; anything outside ASCII fails
        # as an invalid symbol at its offset
        if args.string is not None:
            source = io.StringIO(args.string)
        elif args.file:
            source = stack.enter_context(_open_path(args.file, "rb"))
        else:
            source = sys.stdin.buffer

        if args.output:
            sink = stack.enter_context(_open_path(args.output, "wb"))
        else:
            sink = sys.stdout.buffer

        try:
            decode_stream(
                source,
                sink,
                chunk_size=groups * GROUP_CHARS,
                ignore_whitespace=args.ignore_whitespace,
                allow_unpadded=args.unpadded,
            )
        except DecodeError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        except StreamError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 3
    return 0


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _add_io_args(parser: argparse.ArgumentParser, string_help: str) -> None:
    """Add the input/output selection arguments shared by both subcommands."""
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "-f", "--file", default=None, help="Read input from FILE instead of stdin"
    )
    source.add_argument(
        "-s", "--string", default=None, metavar="STRING", help=string_help
    )
    parser.add_argument(
        "-o", "--output", default=None, help="Write output to FILE instead of stdout"
    )
    parser.add_argument(
        "--chunk-groups",
        default=None,
        help=f"Groups transformed per read (default: ${CHUNK_GROUPS_ENV} or {DEFAULT_CHUNK_GROUPS})",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="i2p-base64",
        description="Encode and decode data with the I2P Base64 alphabet",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__import__('i2p_base64').__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to stderr"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # -- encode --
    p_enc = sub.add_parser("encode", help="Encode bytes to I2P base64")
    _add_io_args(p_enc, "Encode the UTF-8 bytes of STRING")
    p_enc.set_defaults(func=cmd_encode)

    # -- decode --
    p_dec = sub.add_parser("decode", help="Decode I2P base64 to bytes")
    _add_io_args(
        p_dec,
        "Decode STRING instead of reading input; use --string=STRING when "
        "it starts with '-'",
    )
    p_dec.add_argument(
        "--ignore-whitespace",
        action="store_true",
        help="Skip whitespace and newlines in the input (default: reject)",
    )
    p_dec.add_argument(
        "--unpadded",
        action="store_true",
        help="Accept a final group without '=' padding",
    )
    p_dec.set_defaults(func=cmd_decode)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    logger.debug(f"Running {args.command}")
    return args.func(args)
