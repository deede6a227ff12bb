#!/usr/bin/python3
# Copyright (C) 2025 Brantleigh Bunting
# SPDX-License-Identifier: BSL-1.1
#
# Use of this software is governed by the Business Source License
# included in the LICENSE file and at <https://mariadb.com/bsl11>

"""
Command-line front end: run one matrix operation and print the response.

    matrix-engine determinant --matrix '[[1, 2], [3, 4]]'
    matrix-engine solve --matrix '[[2, 0], [0, 2]]' --matrix '[[4], [6]]'
    matrix-engine power --matrix '[[1, 1], [1, 0]]' --power 10
    matrix-engine --input request.json
"""

import argparse
import json
import logging
import sys

from .dispatcher import OPERATIONS, handle_request


def _parse_matrix(text: str):
    try:
        rows = json.loads(text)
    except json.JSONDecodeError as e:
        raise argparse.ArgumentTypeError(f"not valid JSON: {e}")
    return {"data": rows}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="matrix-engine",
        description="Run a dense matrix operation and print the JSON response.",
    )
    parser.add_argument(
        "operation",
        nargs="?",
        choices=sorted(OPERATIONS),
        help="Operation to run (omit when using --input)",
    )
    parser.add_argument(
        "-m",
        "--matrix",
        action="append",
        type=_parse_matrix,
        default=[],
        help="Matrix as a JSON list of rows; repeat for binary operations",
    )
    parser.add_argument("-p", "--power", type=int, help="Exponent for the power operation")
    parser.add_argument("--pivot", action="store_true", help="Use partial pivoting for lu")
    parser.add_argument(
        "-i", "--input", help="Read a full request object from a JSON file ('-' for stdin)"
    )
    parser.add_argument("--indent", type=int, default=2, help="JSON indent of the output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.input:
        if args.input == "-":
            message = json.load(sys.stdin)
        else:
            with open(args.input, "r") as f:
                message = json.load(f)
    else:
        if args.operation is None:
            parser.error("an operation is required unless --input is given")
        params = {}
        if args.power is not None:
            params["power"] = args.power
        if args.pivot:
            params["pivot"] = True
        message = {"operation": args.operation, "matrices": args.matrix, "params": params}

    response = handle_request(message)
    print(json.dumps(response, indent=args.indent, ensure_ascii=False))
    return 1 if "error" in response else 0


if __name__ == "__main__":
    sys.exit(main())
