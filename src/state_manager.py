from typing import Dict, Iterator, Optional

from models import ClientAccount, TransactionRecord


class StateManager:
    """
    Per-client state: each client owns one account and its own table of
    deposit/withdrawal records. Transaction ids are only unique within a client.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, Dict[int, TransactionRecord]] = {}

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Return the client's account, or None if the client has never deposited."""
        return self._accounts.get(client_id)

    def open_account(self, client_id: int) -> ClientAccount:
        """Create an empty account for a new client."""
        account = ClientAccount(client_id=client_id)
        self._accounts[client_id] = account
        self._transactions[client_id] = {}
        return account

    def store_transaction(self, record: TransactionRecord) -> None:
        """Store record under its client for future dispute lookups. A repeated id replaces the earlier record."""
        self._transactions[record.client_id][record.transaction_id] = record

    def get_transaction(self, client_id: int, transaction_id: int) -> Optional[TransactionRecord]:
        """Retrieve a stored record by client and transaction id."""
        return self._transactions.get(client_id, {}).get(transaction_id)

    def iter_accounts(self) -> Iterator[ClientAccount]:
        return iter(self._accounts.values())

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
