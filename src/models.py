from dataclasses import dataclass
from decimal import Context, Decimal, InvalidOperation, ROUND_DOWN
from enum import Enum
from typing import Optional, Union

PRECISION = Decimal("0.0001")
ZERO = Decimal("0")

MAX_CLIENT_ID = 65535
MAX_TRANSACTION_ID = 4294967295

# A single amount holds at most 28 significant digits. Balances get 10 more,
# enough for the sum of one amount per possible transaction id.
AMOUNT_CONTEXT = Context(prec=28)
BALANCE_CONTEXT = Context(prec=38)


def to_money(value: Union[str, int, Decimal]) -> Decimal:
    """Parse an amount and truncate it to 4 decimal places."""
    try:
        amount = Decimal(value)
        if not amount.is_finite():
            raise ValueError(f"invalid amount {value!r}")
        return amount.quantize(PRECISION, rounding=ROUND_DOWN, context=AMOUNT_CONTEXT)
    except InvalidOperation as e:
        raise ValueError(f"invalid amount {value!r}") from e


def format_money(value: Decimal) -> str:
    """Format money with exactly 4 decimal places."""
    return f"{value.quantize(PRECISION, rounding=ROUND_DOWN, context=BALANCE_CONTEXT):f}"


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def creates_record(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class TransactionState(Enum):
    NORMAL = "normal"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


@dataclass(frozen=True)
class Transaction:
    """A single event read from the input log."""

    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class TransactionRecord:
    """
    A deposit or withdrawal kept for later dispute reference.
    Only `state` changes after creation.
    """

    transaction_id: int
    client_id: int
    transaction_type: TransactionType
    amount: Decimal
    state: TransactionState = TransactionState.NORMAL

    @property
    def disputed(self) -> bool:
        return self.state == TransactionState.DISPUTED


@dataclass(frozen=True)
class AccountSnapshot:
    client_id: int
    available: Decimal
    held: Decimal
    locked: bool

    @property
    def total(self) -> Decimal:
        return BALANCE_CONTEXT.add(self.available, self.held)


class ProcessingStats:
    """Counters for a single replay run."""

    def __init__(self):
        self.applied = 0
        self.rejected = 0
        self.unparseable = 0

    def record_success(self):
        self.applied += 1

    def record_failure(self):
        self.rejected += 1

    def record_unparseable(self):
        self.unparseable += 1

    def __repr__(self) -> str:
        return f"ProcessingStats(applied={self.applied}, rejected={self.rejected}, unparseable={self.unparseable})"
