from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ProcessingResult(Enum):
    APPLIED = "applied"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Transaction:
    """
    A single ledger event as read from the input stream.
    For dispute, resolve and chargeback, transaction_id names the referenced transaction
    and amount is None.
    """

    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __post_init__(self):
        carries_amount = self.transaction_type in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)
        if carries_amount and self.amount is None:
            raise ValueError(f"{self.transaction_type.value} tx {self.transaction_id} requires an amount")
        if not carries_amount and self.amount is not None:
            raise ValueError(f"{self.transaction_type.value} tx {self.transaction_id} takes no amount")

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class TransactionRecord:
    """A deposit or withdrawal kept under its client for later dispute lookups."""

    kind: TransactionType
    client_id: int
    transaction_id: int
    amount: Decimal
    disputed: bool = False

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionRecord":
        return cls(
            kind=transaction.transaction_type,
            client_id=transaction.client_id,
            transaction_id=transaction.transaction_id,
            amount=transaction.amount,
        )


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount

    def restore_held(self, amount: Decimal) -> None:
        self.held += amount

    def lock(self) -> None:
        self.locked = True


class ProcessingStats:
    """Counters for events that changed state versus events that had no effect."""

    def __init__(self):
        self.applied = 0
        self.ignored = 0

    def record(self, result: ProcessingResult) -> None:
        if result == ProcessingResult.APPLIED:
            self.applied += 1
        else:
            self.ignored += 1
