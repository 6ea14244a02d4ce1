"""
Command-line entry point.

    leaksim --model power --trace trace.json --coefficients coeffs.json -o leakage.json
    leaksim --list-models
    leaksim --verify-bits --width 16
"""

from __future__ import annotations

import argparse
import json
import logging
from typing import List, Optional

from leaksim.bits import WORD_BITS
from leaksim.coefficients import Coefficients
from leaksim.errors import LeakageModelError
from leaksim.execution import InMemoryExecution
from leaksim.formal import verify_bit_identities
from leaksim.models import available_models
from leaksim.traces import generate

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="leaksim",
        description="Generate synthetic power/EM leakage traces from a simulated execution trace",
    )
    parser.add_argument(
        "--model", "-m",
        default="hamming_weight",
        help="Leakage model name (default: hamming_weight)"
    )
    parser.add_argument(
        "--trace", "-t",
        help="Execution trace JSON file"
    )
    parser.add_argument(
        "--coefficients", "-c",
        help="Coefficients JSON file (required by models with interaction terms)"
    )
    parser.add_argument(
        "--output", "-o",
        help="Output JSON file for the leakage trace"
    )
    parser.add_argument(
        "--list-models",
        action="store_true",
        help="List registered models and exit"
    )
    parser.add_argument(
        "--verify-bits",
        action="store_true",
        help="Prove the bit-interaction identities with Z3 and exit"
    )
    parser.add_argument(
        "--width",
        type=int,
        default=WORD_BITS,
        help=f"Word width for --verify-bits (default: {WORD_BITS})"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns 0 on success, 1 on failed proofs, 2 on errors."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.INFO)

    if args.list_models:
        for name in available_models():
            print(name)
        return 0

    try:
        if args.verify_bits:
            if not 2 <= args.width <= WORD_BITS:
                print(f"Error: --width must be between 2 and {WORD_BITS}, got {args.width}")
                return 2
            report = verify_bit_identities(width=args.width)
            print(report.summary())
            if args.output:
                with open(args.output, 'w') as f:
                    json.dump(report.to_dict(), f, indent=2)
            return 0 if report.all_hold else 1

        if not args.trace:
            parser.error("--trace is required")

        execution = InMemoryExecution.load_json(args.trace)
        if args.coefficients:
            coefficients = Coefficients.load_json(args.coefficients)
        else:
            coefficients = Coefficients({})

        trace = generate(args.model, execution, coefficients)
        print(trace.summary())

        if args.output:
            trace.save_json(args.output)
            print(f"\nLeakage trace written to: {args.output}")

        return 0

    except (LeakageModelError, OSError) as e:
        print(f"Error: {e}")
        return 2


if __name__ == "__main__":
    exit(main())
