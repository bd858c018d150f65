import logging
from typing import Dict, Iterable, Iterator

from models import Transaction, ClientAccount, ProcessingStats
from state_manager import StateManager
from transaction_processor import TransactionProcessor
from csv_io import read_transactions

logger = logging.getLogger(__name__)


class LedgerEngine:
    """
    Applies ledger events to per-client accounts, one at a time in arrival order.
    Events that cannot be applied are dropped without raising, so one bad
    instruction never halts a run.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)
        self.stats = ProcessingStats()

    def apply(self, transaction: Transaction) -> None:
        result = self._processor.process_transaction(transaction)
        self.stats.record(result)

    def apply_all(self, transactions: Iterable[Transaction]) -> None:
        for transaction in transactions:
            self.apply(transaction)

    def snapshot(self) -> Iterator[ClientAccount]:
        """Current state of every account, in no particular client order."""
        return self._state.iter_accounts()

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")
        with open(filepath, "r", encoding="utf-8", errors="replace", newline="") as f:
            self.apply_all(read_transactions(f))

        logger.info(f"Applied: {self.stats.applied}, Ignored: {self.stats.ignored}")
        return self._state.get_all_accounts()
