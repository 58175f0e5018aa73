#!/usr/bin/env python3
"""
Digest Tool - CLI utility for authoring answer digests

Usage:
    python -m answer_system.digest_tool "Open Sesame" 42
    python -m answer_system.digest_tool --check "open sesame" <digest>
"""

import argparse
import sys
from typing import List, Optional

from .secret_matcher import SecretMatcher, hash_answer, is_valid_digest, normalize_answer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="digest_tool",
        description="Print the normalized SHA-256 digest of story answers",
    )
    parser.add_argument("answers", nargs="*", help="Plaintext answers to digest")
    parser.add_argument(
        "--check",
        nargs=2,
        metavar=("ANSWER", "DIGEST"),
        help="Check whether ANSWER matches DIGEST",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.check:
        answer, digest = args.check
        if not is_valid_digest(digest):
            print(f"❌ Not a 64-character lowercase hex digest: {digest}")
            return 2
        if SecretMatcher().matches(answer, digest):
            print("✅ match")
            return 0
        print("❌ no match")
        return 1

    if not args.answers:
        print("❌ Give at least one answer (or --check ANSWER DIGEST)")
        return 2

    for answer in args.answers:
        print(f"{hash_answer(answer)}  {normalize_answer(answer)!r}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
