#!/usr/bin/env python3
"""CLI tool to tokenize an XML file in chunks and export tokens to JSON.

Usage:
    python examples/tokenize_xml.py <input_file> [-o output_file]

Examples:
    python examples/tokenize_xml.py testdata/catalog.xml
    python examples/tokenize_xml.py testdata/catalog.xml -o tokens.json --chunk-size 16
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from sxml import Token, TokenStream, XMLTokenizeError, iter_chunks


def token_to_dict(token: Token, buffer: bytes) -> dict[str, Any]:
    """Convert a Token to a JSON-serializable dict."""
    return {
        "type": token.type.name.lower(),
        "start": token.start,
        "end": token.end,
        "size": token.size,
        "text": token.decode(buffer, "utf-8") if token.end > token.start else "",
    }


def tokenize_file(path: Path, *, chunk_size: int, check_end_names: bool) -> list[dict[str, Any]]:
    """Feed a file through a TokenStream chunk by chunk."""
    stream = TokenStream(check_end_names=check_end_names)
    for chunk in iter_chunks(path.read_bytes(), chunk_size):
        stream.feed(chunk)
    tokens = stream.close()
    buffer = stream.buffer
    return [token_to_dict(token, buffer) for token in tokens]


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Tokenize an XML file and export the token spans as JSON",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s testdata/catalog.xml
  %(prog)s testdata/catalog.xml -o tokens.json --pretty
  %(prog)s testdata/catalog.xml --chunk-size 7 --verbose
        """,
    )
    parser.add_argument(
        "input",
        type=Path,
        help="Input XML file to tokenize",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="Output JSON file (default: stdout)",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty-print JSON output",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=4096,
        help="Bytes fed to the tokenizer per call (default: 4096)",
    )
    parser.add_argument(
        "--check-end-names",
        action="store_true",
        help="Reject end tags whose name does not match the open element",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log tokenizer suspensions and array growth",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    if not args.input.exists():
        print(f"Error: Input file not found: {args.input}", file=sys.stderr)
        return 1

    try:
        data = tokenize_file(args.input, chunk_size=args.chunk_size, check_end_names=args.check_end_names)
    except XMLTokenizeError as e:
        print(f"Error tokenizing file: {e}", file=sys.stderr)
        return 1

    indent = 2 if args.pretty else None
    json_output = json.dumps(data, indent=indent, ensure_ascii=False)

    if args.output:
        args.output.write_text(json_output)
        print(f"Wrote {len(data)} tokens to {args.output}", file=sys.stderr)
    else:
        print(json_output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
