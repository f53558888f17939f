"""
Command-line front end for the Payments Engine

Usage:
    python -m app.main transactions.csv > accounts.csv
    python -m app.main transactions.csv --output accounts.csv --order first_seen

Reads the transaction CSV, replays it, and writes one row per account
(client, available, held, total, locked). Diagnostics for malformed or
rejected records go to stderr; they never change the exit code.

Exit codes:
    0  replay completed
    1  input missing or unusable
    2  invalid options
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from payments_engine import __version__
from payments_engine.audit import configure_logging
from payments_engine.config import EngineSettings
from payments_engine.orchestrator import create_replay_flow
from payments_engine.services.csv_io import CsvTransactionSource, SourceFormatError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payments-engine",
        description="Replay a transaction CSV and print final account balances.",
    )
    parser.add_argument("input", help="Path to the transactions CSV")
    parser.add_argument(
        "-o", "--output",
        help="Write the account CSV here instead of stdout",
    )
    parser.add_argument(
        "--order",
        choices=["ascending", "first_seen"],
        help="Order of accounts in the output (default: ascending client id)",
    )
    parser.add_argument(
        "--precision",
        type=int,
        help="Fractional digits per balance (default: 4)",
    )
    parser.add_argument(
        "--log-level",
        help="Diagnostics level on stderr (default: WARNING)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def load_settings(args: argparse.Namespace) -> EngineSettings:
    """Environment/.env settings, overridden by explicit flags."""
    overrides = {
        "account_order": args.order,
        "output_precision": args.precision,
        "log_level": args.log_level,
    }
    return EngineSettings(**{k: v for k, v in overrides.items() if v is not None})


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(args)
    except ValidationError as e:
        print(f"Invalid options: {e}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level, settings.log_json)

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"File not found: {input_path}", file=sys.stderr)
        return 1

    flow = create_replay_flow(settings)
    source = CsvTransactionSource(input_path)

    try:
        if args.output:
            with open(args.output, "w", newline="", encoding="utf-8") as out:
                flow.run_to(source, out, source_name=source.name)
        else:
            flow.run_to(source, sys.stdout, source_name=source.name)
    except SourceFormatError as e:
        print(str(e), file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Cannot read or write: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
