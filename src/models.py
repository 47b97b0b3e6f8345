from collections import Counter
from dataclasses import dataclass, field, replace
from decimal import Context, Decimal, DivisionByZero, Inexact, InvalidOperation, Overflow
from enum import Enum
from typing import Dict, List, Optional


# Exact for any sum of bounded four-place amounts; a lost digit raises instead of rounding.
MONEY_CONTEXT = Context(prec=48, traps=[InvalidOperation, DivisionByZero, Overflow, Inexact])


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ErrorCategory(Enum):
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    ACCOUNT_FROZEN = "account_frozen"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    UNKNOWN_OR_INELIGIBLE_REFERENCE = "unknown_or_ineligible_reference"


class ProcessingResult(Enum):
    """
    Outcome of applying one transaction to a ledger.
    APPLIED is the only success; every other member is the reason it was ignored.
    """

    APPLIED = "applied"
    ACCOUNT_FROZEN = "account_frozen"
    INVALID_AMOUNT = "invalid_amount"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    DUPLICATE_TRANSACTION = "duplicate_transaction"
    NOT_DISPUTABLE = "not_disputable"
    NOT_RESOLVABLE = "not_resolvable"
    NOT_CHARGEBACKABLE = "not_chargebackable"

    @property
    def applied(self) -> bool:
        return self is ProcessingResult.APPLIED

    @property
    def category(self) -> Optional[ErrorCategory]:
        return _RESULT_CATEGORIES.get(self)


_RESULT_CATEGORIES = {
    ProcessingResult.ACCOUNT_FROZEN: ErrorCategory.ACCOUNT_FROZEN,
    ProcessingResult.INVALID_AMOUNT: ErrorCategory.INVALID_AMOUNT,
    ProcessingResult.INSUFFICIENT_FUNDS: ErrorCategory.INSUFFICIENT_FUNDS,
    ProcessingResult.DUPLICATE_TRANSACTION: ErrorCategory.DUPLICATE_TRANSACTION,
    ProcessingResult.NOT_DISPUTABLE: ErrorCategory.UNKNOWN_OR_INELIGIBLE_REFERENCE,
    ProcessingResult.NOT_RESOLVABLE: ErrorCategory.UNKNOWN_OR_INELIGIBLE_REFERENCE,
    ProcessingResult.NOT_CHARGEBACKABLE: ErrorCategory.UNKNOWN_OR_INELIGIBLE_REFERENCE,
}


class DisputeState(Enum):
    CLEAN = "clean"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class DepositRecord:
    """Bookkeeping for one deposit so later disputes can recover its amount."""

    client_id: int
    amount: Decimal
    state: DisputeState = DisputeState.CLEAN


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return MONEY_CONTEXT.add(self.available, self.held)

    def credit(self, amount: Decimal) -> None:
        self.available = MONEY_CONTEXT.add(self.available, amount)

    def debit(self, amount: Decimal) -> None:
        self.available = MONEY_CONTEXT.subtract(self.available, amount)

    def hold(self, amount: Decimal) -> None:
        self.available = MONEY_CONTEXT.subtract(self.available, amount)
        self.held = MONEY_CONTEXT.add(self.held, amount)

    def release_hold(self, amount: Decimal) -> None:
        self.held = MONEY_CONTEXT.subtract(self.held, amount)
        self.available = MONEY_CONTEXT.add(self.available, amount)

    def remove_held(self, amount: Decimal) -> None:
        self.held = MONEY_CONTEXT.subtract(self.held, amount)

    def copy(self) -> "ClientAccount":
        return replace(self)


@dataclass
class Snapshot:
    """Final account state of one ledger, labelled with the input it came from."""

    source: str
    accounts: Dict[int, ClientAccount] = field(default_factory=dict)

    def sorted_accounts(self) -> List[ClientAccount]:
        return [self.accounts[client_id] for client_id in sorted(self.accounts)]


class ProcessingStats:
    """Counters for applied and ignored transactions of a single engine run."""

    def __init__(self):
        self.applied = 0
        self.ignored: Counter = Counter()

    def record(self, result: ProcessingResult) -> None:
        if result.applied:
            self.applied += 1
        else:
            self.ignored[result] += 1

    @property
    def total_ignored(self) -> int:
        return sum(self.ignored.values())

    def summary(self) -> str:
        reasons = ", ".join(f"{result.value}={count}" for result, count in sorted(self.ignored.items(), key=lambda item: item[0].value))
        if reasons:
            return f"Applied: {self.applied}, Ignored: {self.total_ignored} ({reasons})"
        return f"Applied: {self.applied}, Ignored: 0"
