#!/usr/bin/env python3
"""
CLI tool to compute the Checkeeper signature of a JSON request.

Usage:
    python -m checkeeper.cli.sign_request \
        --in tests/golden/create_check_request.json \
        --secret secret \
        --token anytoken
"""

import argparse
import json
import logging
import sys
from typing import List, Optional

from ..utils.canonical_form import canonical_string
from ..utils.signing import SIGNATURE_FIELD, TOKEN_FIELD, sign_string

logger = logging.getLogger(__name__)


def load_request(path: str) -> dict:
    """Load a JSON request object from a file, or stdin when path is '-'."""
    if path == '-':
        request = json.load(sys.stdin)
    else:
        with open(path, 'r', encoding='utf-8') as f:
            request = json.load(f)

    if not isinstance(request, dict):
        raise ValueError("Request must be a JSON object")
    return request


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description='Compute the signature of a Checkeeper request')
    parser.add_argument('--in', dest='input', required=True, help="Input JSON file ('-' for stdin)")
    parser.add_argument('--secret', required=True, help='Checkeeper secret key')
    parser.add_argument('--token', help='Token to merge into the request before signing')
    parser.add_argument('--canonical', action='store_true', help='Print the canonical string instead of the signature')
    parser.add_argument('--verbose', action='store_true', help='Log debug output to stderr')

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr)

    try:
        request = load_request(args.input)
    except (OSError, ValueError) as e:
        print(f"Cannot read request: {e}", file=sys.stderr)
        return 1

    if request.pop(SIGNATURE_FIELD, None) is not None:
        logger.debug("Dropped existing signature field before signing")
    if args.token is not None:
        request[TOKEN_FIELD] = args.token

    canonical = canonical_string(request)
    logger.debug(f"Canonical string has {len(canonical)} characters")

    if args.canonical:
        print(canonical)
    else:
        print(sign_string(canonical, args.secret))
    return 0


if __name__ == '__main__':
    sys.exit(main())
