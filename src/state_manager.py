from typing import Dict, Optional

from models import ClientAccount, FundsTransaction


class LedgerState:
    """
    State owned by a single ledger run.
    Stores client accounts and the index of applied deposits/withdrawals for dispute lookups.
    Not thread-safe: each run (or partition) owns its own instance.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._transactions: Dict[int, FundsTransaction] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def store_transaction(self, transaction: FundsTransaction) -> bool:
        """
        Index an applied deposit/withdrawal for future dispute lookups.
        The index is append-only: returns False and keeps the first entry if the id is already indexed.
        """
        if transaction.transaction_id in self._transactions:
            return False
        self._transactions[transaction.transaction_id] = transaction
        return True

    def get_transaction(self, transaction_id: int) -> Optional[FundsTransaction]:
        """Retrieve indexed transaction by ID."""
        return self._transactions.get(transaction_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
