import sys
import logging

from csv_reader import TransactionParseError, read_transactions
from ledger_engine import LedgerEngine
from report import write_report

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    filepath = argv[0]
    try:
        transactions = read_transactions(filepath)
    except OSError as e:
        logger.error(f"Cannot read {filepath}: {e}")
        return 1
    except TransactionParseError as e:
        logger.error(f"Aborting, malformed record in {filepath}: {e}")
        return 1

    accounts = LedgerEngine().process(transactions)
    write_report(accounts, sys.stdout)
    return 0


def run() -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    sys.exit(main())


if __name__ == "__main__":
    run()
