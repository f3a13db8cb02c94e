"""Main CLI entry point for qpack."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from .. import __version__
from ..codec import decode, encode
from ..config import Config
from ..exceptions import QPackError
from .tokens import dump_tokens


def _read_input(path: str | None) -> bytes:
    if path is None or path == "-":
        return sys.stdin.buffer.read()
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    return file_path.read_bytes()


def _read_qpack(path: str | None, hex_input: bool) -> bytes:
    data = _read_input(path)
    if hex_input:
        return bytes.fromhex(data.decode("ascii").strip())
    return data


def _jsonable(value: Any) -> Any:
    """Make decoded bytes printable as JSON."""
    if isinstance(value, (bytes, bytearray)):
        return value.hex()
    if isinstance(value, list):
        return [_jsonable(item) for item in value]
    if isinstance(value, dict):
        return {
            (key.hex() if isinstance(key, bytes) else key): _jsonable(item)
            for key, item in value.items()
        }
    return value


def _build_config(args: argparse.Namespace) -> Config:
    options: dict[str, Any] = {"decode_raw_as_str": not args.raw_bytes}
    if args.max_depth is not None:
        options["encode_max_depth"] = args.max_depth
        options["decode_max_depth"] = args.max_depth
    if args.empty_as_array:
        options["encode_empty_table_as_array"] = True
    return Config(**options)


def _run(args: argparse.Namespace) -> int:
    config = _build_config(args)

    if args.command == "encode":
        value = json.loads(_read_input(args.file))
        data = encode(value, config)
        if args.hex:
            print(data.hex())
        else:
            sys.stdout.buffer.write(data)
            sys.stdout.buffer.flush()
        return 0

    if args.command == "decode":
        value = decode(_read_qpack(args.file, args.hex), config)
        print(json.dumps(_jsonable(value), indent=args.indent))
        return 0

    if args.command == "inspect":
        dump_tokens(_read_qpack(args.file, args.hex), sys.stdout)
        return 0

    raise ValueError(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the qpack CLI."""
    parser = argparse.ArgumentParser(
        prog="qpack",
        description="qpack: compact binary serialization",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  echo '{"a": 1}' | qpack encode --hex      Encode JSON, print hex
  qpack encode data.json > data.qp          Encode JSON file to QPack
  qpack decode data.qp                      Decode QPack file to JSON
  qpack inspect --hex dump.txt              Show the token stream
        """,
    )

    parser.add_argument("--version", action="version", version=f"qpack {__version__}")
    parser.add_argument(
        "--max-depth",
        metavar="N",
        type=int,
        help="Maximum nesting depth for encoding and decoding (default 1000)",
    )
    parser.add_argument(
        "--empty-as-array",
        action="store_true",
        help="Encode empty JSON objects as empty arrays",
    )
    parser.add_argument(
        "--raw-bytes",
        action="store_true",
        help="Decode raw values as bytes (printed as hex) instead of UTF-8 text",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    encode_parser = subparsers.add_parser("encode", help="Encode JSON to QPack")
    encode_parser.add_argument("file", nargs="?", help="JSON input file (default: stdin)")
    encode_parser.add_argument("--hex", action="store_true", help="Write hex instead of binary")

    decode_parser = subparsers.add_parser("decode", help="Decode QPack to JSON")
    decode_parser.add_argument("file", nargs="?", help="QPack input file (default: stdin)")
    decode_parser.add_argument("--hex", action="store_true", help="Input is hex text")
    decode_parser.add_argument("--indent", type=int, default=None, help="JSON indentation")

    inspect_parser = subparsers.add_parser("inspect", help="Print the QPack token stream")
    inspect_parser.add_argument("file", nargs="?", help="QPack input file (default: stdin)")
    inspect_parser.add_argument("--hex", action="store_true", help="Input is hex text")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the qpack CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose and not logging.getLogger().handlers:
        logging.basicConfig(level=logging.DEBUG)

    # If no command specified, show help
    if args.command is None:
        parser.print_help()
        return 0

    try:
        return _run(args)
    except (QPackError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
