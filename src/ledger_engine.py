import logging
from typing import Dict, Iterable, Optional

from models import (
    Chargeback,
    ClientAccount,
    Deposit,
    Dispute,
    FundsTransaction,
    ProcessingResult,
    ProcessingStats,
    Resolve,
    Transaction,
    Withdrawal,
)
from state_manager import LedgerState

logger = logging.getLogger(__name__)


class LedgerEngine:
    """
    Replays transactions against per-client accounts, in input order.

    Every record either applies or is ignored; invalid references, insufficient
    funds and frozen accounts are no-ops, never errors.
    """

    def __init__(self, stats: Optional[ProcessingStats] = None):
        self._state = LedgerState()
        self.stats = stats if stats is not None else ProcessingStats()

    def process(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """
        Apply every transaction in order and return the final account states.
        Each call is a fresh run: accounts, the transaction index and stats start empty.
        """
        self._state = LedgerState()
        self.stats = ProcessingStats()
        for transaction in transactions:
            self.apply(transaction)

        logger.info(f"Applied: {self.stats.applied}, Ignored: {self.stats.ignored}")
        return self.accounts

    @property
    def accounts(self) -> Dict[int, ClientAccount]:
        return self._state.get_all_accounts()

    def apply(self, transaction: Transaction) -> ProcessingResult:
        """
        Apply a single transaction.

        Returns:
            APPLIED: The account was changed
            IGNORED: The transaction was a no-op (frozen account, insufficient funds, bad reference)
        """
        account = self._state.get_or_create_account(transaction.client_id)

        match transaction:
            case Deposit():
                result = self._handle_deposit(account, transaction)
            case Withdrawal():
                result = self._handle_withdrawal(account, transaction)
            case Dispute():
                result = self._handle_dispute(account, transaction)
            case Resolve():
                result = self._handle_resolve(account, transaction)
            case Chargeback():
                result = self._handle_chargeback(account, transaction)
            case _:
                raise TypeError(f"Not a transaction: {transaction!r}")

        self.stats.record(result)
        return result

    def _handle_deposit(self, account: ClientAccount, transaction: Deposit) -> ProcessingResult:
        if account.locked:
            logger.debug(f"Deposit tx {transaction.transaction_id}: account {account.client_id} is frozen")
            return ProcessingResult.IGNORED

        account.credit(transaction.amount)
        self._index(transaction)
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, account: ClientAccount, transaction: Withdrawal) -> ProcessingResult:
        if account.locked:
            logger.debug(f"Withdrawal tx {transaction.transaction_id}: account {account.client_id} is frozen")
            return ProcessingResult.IGNORED

        if transaction.amount > account.available:
            logger.debug(f"Withdrawal tx {transaction.transaction_id}: insufficient funds ({account.available} < {transaction.amount})")
            return ProcessingResult.IGNORED

        account.debit(transaction.amount)
        self._index(transaction)
        return ProcessingResult.APPLIED

    def _handle_dispute(self, account: ClientAccount, transaction: Dispute) -> ProcessingResult:
        original = self._state.get_transaction(transaction.transaction_id)

        if original is None:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: transaction not found")
            return ProcessingResult.IGNORED

        if transaction.transaction_id in account.disputed:
            logger.debug(f"Dispute for tx {transaction.transaction_id}: transaction already disputed")
            return ProcessingResult.IGNORED

        account.hold(transaction.transaction_id, original.amount)
        return ProcessingResult.APPLIED

    def _handle_resolve(self, account: ClientAccount, transaction: Resolve) -> ProcessingResult:
        if transaction.transaction_id not in account.disputed:
            logger.debug(f"Resolve for tx {transaction.transaction_id}: transaction not disputed")
            return ProcessingResult.IGNORED

        original = self._state.get_transaction(transaction.transaction_id)
        account.release_hold(transaction.transaction_id, original.amount)
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, account: ClientAccount, transaction: Chargeback) -> ProcessingResult:
        if transaction.transaction_id not in account.disputed:
            logger.debug(f"Chargeback for tx {transaction.transaction_id}: transaction not disputed")
            return ProcessingResult.IGNORED

        original = self._state.get_transaction(transaction.transaction_id)
        account.remove_held(transaction.transaction_id, original.amount)
        return ProcessingResult.APPLIED

    def _index(self, transaction: FundsTransaction) -> None:
        if not self._state.store_transaction(transaction):
            logger.warning(f"Tx {transaction.transaction_id}: id already used by an earlier transaction, keeping the original for disputes")
