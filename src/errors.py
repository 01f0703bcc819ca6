from decimal import Decimal
from typing import Optional

from models import Transaction, TransactionType


class ProcessingError(Exception):
    """
    Raised when an event cannot be applied to an account.
    The account is left exactly as it was before the event.
    """

    reason = "processing failed"

    def __init__(
        self,
        transaction_type: TransactionType,
        client_id: int,
        transaction_id: int,
        amount: Optional[Decimal] = None,
    ):
        self.transaction_type = transaction_type
        self.client_id = client_id
        self.transaction_id = transaction_id
        self.amount = amount
        super().__init__(str(self))

    @classmethod
    def for_transaction(cls, transaction: Transaction, amount: Optional[Decimal] = None) -> "ProcessingError":
        return cls(
            transaction.transaction_type,
            transaction.client_id,
            transaction.transaction_id,
            amount if amount is not None else transaction.amount,
        )

    def __str__(self) -> str:
        amount_detail = f" of {self.amount}" if self.amount is not None else ""
        return (
            f"{self.transaction_type.value} tx {self.transaction_id} for client {self.client_id}"
            f"{amount_detail}: {self.reason}"
        )


class InvalidAmount(ProcessingError):
    reason = "invalid amount"


class AccountFrozen(ProcessingError):
    reason = "account frozen"


class InsufficientFunds(ProcessingError):
    reason = "insufficient funds"


class DuplicateTransaction(ProcessingError):
    reason = "transaction id already exists"


class UnknownTransaction(ProcessingError):
    # also covers a transaction owned by another client
    reason = "transaction does not exist"


class TransactionNotDisputable(ProcessingError):
    reason = "only deposits can be disputed"


class TransactionAlreadyDisputed(ProcessingError):
    reason = "transaction already disputed"


class TransactionNotDisputed(ProcessingError):
    reason = "transaction is not disputed"


class InsufficientHeldFunds(ProcessingError):
    reason = "insufficient held funds"
