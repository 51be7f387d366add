import threading
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import ClassVar, Set, Union


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
class Deposit:
    transaction_type: ClassVar[TransactionType] = TransactionType.DEPOSIT

    client_id: int
    transaction_id: int
    amount: Decimal


@dataclass(frozen=True)
class Withdrawal:
    transaction_type: ClassVar[TransactionType] = TransactionType.WITHDRAWAL

    client_id: int
    transaction_id: int
    amount: Decimal


@dataclass(frozen=True)
class Dispute:
    transaction_type: ClassVar[TransactionType] = TransactionType.DISPUTE

    client_id: int
    transaction_id: int


@dataclass(frozen=True)
class Resolve:
    transaction_type: ClassVar[TransactionType] = TransactionType.RESOLVE

    client_id: int
    transaction_id: int


@dataclass(frozen=True)
class Chargeback:
    transaction_type: ClassVar[TransactionType] = TransactionType.CHARGEBACK

    client_id: int
    transaction_id: int


# Only these two kinds move funds and can be referenced later.
FundsTransaction = Union[Deposit, Withdrawal]
Transaction = Union[Deposit, Withdrawal, Dispute, Resolve, Chargeback]


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False
    disputed: Set[int] = field(default_factory=set)

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, transaction_id: int, amount: Decimal) -> None:
        self.disputed.add(transaction_id)
        self.held += amount

    def release_hold(self, transaction_id: int, amount: Decimal) -> None:
        self.disputed.discard(transaction_id)
        self.held -= amount
        self.available += amount

    def remove_held(self, transaction_id: int, amount: Decimal) -> None:
        self.disputed.discard(transaction_id)
        self.held -= amount
        self.locked = True


class ProcessingStats:
    """Thread-safe counters for tracking processing statistics."""

    def __init__(self):
        self._lock = threading.Lock()
        self.applied = 0
        self.ignored = 0

    def record(self, result: ProcessingResult) -> None:
        with self._lock:
            if result == ProcessingResult.APPLIED:
                self.applied += 1
            else:
                self.ignored += 1

    @property
    def processed(self) -> int:
        return self.applied + self.ignored
