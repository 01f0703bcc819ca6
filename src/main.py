import argparse
import csv
import logging
import sys
from typing import Dict, Optional, Sequence, TextIO

from engine import PaymentsEngine
from models import AccountSnapshot, format_money

REPORT_FIELDS = ["client", "available", "held", "total", "locked"]


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="payments-ledger",
        description="Replay a CSV log of payment events and print the resulting client accounts.",
    )
    parser.add_argument("input_file", help="CSV file with type, client, tx, amount columns.")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every rejected or unparseable event to stderr.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Also log processing statistics.",
    )
    return parser.parse_args(argv)


def write_report(accounts: Dict[int, AccountSnapshot], stream: TextIO) -> None:
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(REPORT_FIELDS)
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        writer.writerow([
            client_id,
            format_money(account.available),
            format_money(account.held),
            format_money(account.total),
            str(account.locked).lower(),
        ])


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)

    level = logging.ERROR
    if args.debug:
        level = logging.INFO
    elif args.verbose:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(args.input_file)
    except OSError as e:
        print(f"Cannot read {args.input_file}: {e}", file=sys.stderr)
        return 1

    write_report(accounts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
