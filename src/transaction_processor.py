import logging
from decimal import MAX_EMAX, MAX_PREC, MIN_EMIN, localcontext
from typing import Optional, Tuple

from models import Transaction, TransactionRecord, TransactionType, ClientAccount, ProcessingResult
from state_manager import StateManager

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions against state.
    Returns ProcessingResult so callers and tests can tell whether state changed;
    an ignored transaction leaves every balance and record untouched.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            APPLIED: State was changed
            IGNORED: The transaction was not applicable (unknown client or tx, insufficient funds,
                     wrong dispute state) and had no effect
        """
        with localcontext() as ctx:
            # Unbounded context: adding, subtracting and comparing stay exact at any size.
            ctx.prec = MAX_PREC
            ctx.Emax = MAX_EMAX
            ctx.Emin = MIN_EMIN
            match transaction.transaction_type:
                case TransactionType.DEPOSIT:
                    return self._handle_deposit(transaction)
                case TransactionType.WITHDRAWAL:
                    return self._handle_withdrawal(transaction)
                case TransactionType.DISPUTE:
                    return self._handle_dispute(transaction)
                case TransactionType.RESOLVE:
                    return self._handle_resolve(transaction)
                case TransactionType.CHARGEBACK:
                    return self._handle_chargeback(transaction)
                case _:
                    return ProcessingResult.IGNORED

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        # Locked accounts still accept deposits; locking only marks the account.
        account = self._state.get_account(transaction.client_id)
        if account is None:
            account = self._state.open_account(transaction.client_id)

        account.credit(transaction.amount)
        self._state.store_transaction(TransactionRecord.from_transaction(transaction))
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        account = self._state.get_account(transaction.client_id)
        if account is None:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: client {transaction.client_id} has no account")
            return ProcessingResult.IGNORED

        if account.available < transaction.amount:
            logger.info(f"Withdrawal tx {transaction.transaction_id}: insufficient funds (available {account.available}, requested {transaction.amount})")
            return ProcessingResult.IGNORED

        account.debit(transaction.amount)
        self._state.store_transaction(TransactionRecord.from_transaction(transaction))
        return ProcessingResult.APPLIED

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        account, original = self._lookup(transaction)
        if original is None:
            return ProcessingResult.IGNORED

        if original.disputed:
            logger.info(f"Dispute for tx {transaction.transaction_id}: transaction already disputed")
            return ProcessingResult.IGNORED

        match original.kind:
            case TransactionType.DEPOSIT:
                account.hold(original.amount)
            case TransactionType.WITHDRAWAL:
                # Disputing a withdrawal returns its funds to available and drives held down.
                account.release_hold(original.amount)
        original.disputed = True
        return ProcessingResult.APPLIED

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        account, original = self._lookup(transaction)
        if original is None:
            return ProcessingResult.IGNORED

        if not original.disputed:
            logger.info(f"Resolve for tx {transaction.transaction_id}: transaction not under dispute")
            return ProcessingResult.IGNORED

        match original.kind:
            case TransactionType.DEPOSIT:
                account.release_hold(original.amount)
            case TransactionType.WITHDRAWAL:
                account.hold(original.amount)
        original.disputed = False
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        account, original = self._lookup(transaction)
        if original is None:
            return ProcessingResult.IGNORED

        if not original.disputed:
            logger.info(f"Chargeback for tx {transaction.transaction_id}: transaction not under dispute")
            return ProcessingResult.IGNORED

        match original.kind:
            case TransactionType.DEPOSIT:
                account.remove_held(original.amount)
            case TransactionType.WITHDRAWAL:
                account.restore_held(original.amount)
        account.lock()
        # The record can be disputed again after a chargeback.
        original.disputed = False
        return ProcessingResult.APPLIED

    def _lookup(self, transaction: Transaction) -> Tuple[Optional[ClientAccount], Optional[TransactionRecord]]:
        """Find the account and the referenced record for a dispute, resolve or chargeback."""
        account = self._state.get_account(transaction.client_id)
        if account is None:
            logger.info(f"{transaction.transaction_type.value.capitalize()} for tx {transaction.transaction_id}: client {transaction.client_id} has no account")
            return None, None

        original = self._state.get_transaction(transaction.client_id, transaction.transaction_id)
        if original is None:
            logger.info(f"{transaction.transaction_type.value.capitalize()} for tx {transaction.transaction_id}: no such transaction for client {transaction.client_id}")
        return account, original
