import sys
import logging

from ledger_engine import LedgerEngine
from csv_io import write_accounts

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
    stream=sys.stderr,
)


def main(argv=None):
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print("Usage: xact-ledger <input.csv>", file=sys.stderr)
        sys.exit(1)

    filepath = args[0]
    engine = LedgerEngine()
    try:
        accounts = engine.process_file(filepath)
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    write_accounts(sys.stdout, (accounts[client_id] for client_id in sorted(accounts)))


if __name__ == "__main__":
    main()
