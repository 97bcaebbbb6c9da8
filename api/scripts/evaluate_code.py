#!/usr/bin/env python3
"""Score a source file (or a line range of it) against every credit metric."""

from __future__ import annotations

import argparse
import json
import sys

from credit_ledger.services.code_source_service import read_code_from_file, read_whole_file
from credit_ledger.services.report_formatter import format_valuation
from credit_ledger.services.valuation_engine import ValuationEngine


def main() -> int:
    parser = argparse.ArgumentParser(description="Evaluate code credit metrics for a file.")
    parser.add_argument("path", help="Source file to evaluate.")
    parser.add_argument("--start", type=int, default=None, help="First line (0-based, inclusive).")
    parser.add_argument("--end", type=int, default=None, help="Last line (0-based, inclusive).")
    parser.add_argument("--json", action="store_true", help="Output raw JSON.")
    args = parser.parse_args()

    if args.start is None and args.end is None:
        code = read_whole_file(args.path)
    else:
        start = args.start if args.start is not None else 0
        end = args.end if args.end is not None else sys.maxsize
        code = read_code_from_file(args.path, start, end)
    if code is None:
        print(f"Could not read code from {args.path}", file=sys.stderr)
        return 1

    result = ValuationEngine().evaluate(code)
    if args.json:
        print(json.dumps(result.model_dump(mode="json"), indent=2))
        return 0

    print(f"Code credit valuation: {args.path}")
    print("")
    print(format_valuation(result.evaluations, result.score), end="")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
