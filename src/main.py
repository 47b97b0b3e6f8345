import argparse
import csv
import io
import logging
import sys
from typing import List, Optional

from payments_engine import PaymentsEngine

LOG_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payments-ledger",
        description="Apply transaction CSV files to client accounts and print the final balances as CSV.",
    )
    parser.add_argument("inputs", nargs="+", metavar="INPUT", help="transaction CSV file, one independent ledger per file")
    parser.add_argument("-o", "--output", help="write accounts CSV here instead of standard output")
    parser.add_argument("--capacity", type=int, default=0, help="channel capacity between stages (0 = unbounded)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="more logging on stderr (-v info, -vv debug)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=LOG_LEVELS[min(args.verbose, len(LOG_LEVELS) - 1)],
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine(channel_capacity=max(args.capacity, 0))
    rendered = io.StringIO()
    try:
        engine.process_files(args.inputs, output=rendered)
        # Only touch the output once every input was read.
        if args.output:
            with open(args.output, "w", newline="") as output:
                output.write(rendered.getvalue())
        else:
            sys.stdout.write(rendered.getvalue())
    except (OSError, csv.Error, UnicodeDecodeError) as e:
        print(f"payments-ledger: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
