import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional

from errors import (
    AccountFrozen,
    DuplicateTransaction,
    InsufficientFunds,
    InsufficientHeldFunds,
    InvalidAmount,
    TransactionAlreadyDisputed,
    TransactionNotDisputable,
    TransactionNotDisputed,
    UnknownTransaction,
)
from models import (
    BALANCE_CONTEXT,
    ZERO,
    AccountSnapshot,
    Transaction,
    TransactionRecord,
    TransactionState,
    TransactionType,
    to_money,
)

logger = logging.getLogger(__name__)


@dataclass
class ClientAccount:
    """
    Per-client balances and the deposits/withdrawals the client owns.

    Every handler either applies the event in full or raises a
    ProcessingError before touching any state.
    """

    client_id: int
    available: Decimal = ZERO
    held: Decimal = ZERO
    locked: bool = False
    transactions: Dict[int, TransactionRecord] = field(default_factory=dict, repr=False)

    @property
    def total(self) -> Decimal:
        return BALANCE_CONTEXT.add(self.available, self.held)

    def credit(self, amount: Decimal) -> None:
        self.available = BALANCE_CONTEXT.add(self.available, amount)

    def debit(self, amount: Decimal) -> None:
        self.available = BALANCE_CONTEXT.subtract(self.available, amount)

    def hold(self, amount: Decimal) -> None:
        self.debit(amount)
        self.held = BALANCE_CONTEXT.add(self.held, amount)

    def release_hold(self, amount: Decimal) -> None:
        self.remove_held(amount)
        self.credit(amount)

    def remove_held(self, amount: Decimal) -> None:
        self.held = BALANCE_CONTEXT.subtract(self.held, amount)

    def get_transaction(self, transaction_id: int) -> Optional[TransactionRecord]:
        return self.transactions.get(transaction_id)

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client_id=self.client_id,
            available=self.available,
            held=self.held,
            locked=self.locked,
        )

    def apply(self, transaction: Transaction, id_taken: bool = False) -> None:
        """
        Apply one event to this account.

        `id_taken` marks a transaction id already used elsewhere in the
        ledger, so a new deposit or withdrawal must not reuse it.

        Raises:
            AccountFrozen: the account was locked by an earlier chargeback
            ProcessingError: any other rejection, see the individual handlers
        """
        if transaction.client_id != self.client_id:
            raise ValueError(f"{transaction} does not belong to client {self.client_id}")

        if self.locked:
            raise AccountFrozen.for_transaction(transaction)

        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                self._handle_deposit(transaction, id_taken)
            case TransactionType.WITHDRAWAL:
                self._handle_withdrawal(transaction, id_taken)
            case TransactionType.DISPUTE:
                self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                self._handle_chargeback(transaction)

    def _new_record_amount(self, transaction: Transaction, id_taken: bool) -> Decimal:
        """Validate a deposit or withdrawal and return its amount truncated to 4 places."""
        if transaction.amount is None:
            raise InvalidAmount.for_transaction(transaction)
        try:
            amount = to_money(transaction.amount)
        except ValueError:
            raise InvalidAmount.for_transaction(transaction) from None
        if amount <= 0:
            raise InvalidAmount.for_transaction(transaction)

        if id_taken or transaction.transaction_id in self.transactions:
            raise DuplicateTransaction.for_transaction(transaction)

        return amount

    def _store(self, transaction: Transaction, amount: Decimal) -> None:
        self.transactions[transaction.transaction_id] = TransactionRecord(
            transaction_id=transaction.transaction_id,
            client_id=transaction.client_id,
            transaction_type=transaction.transaction_type,
            amount=amount,
        )

    def _referenced(self, transaction: Transaction) -> TransactionRecord:
        # Records of other clients are never in this map, so they read as unknown
        original = self.transactions.get(transaction.transaction_id)
        if original is None:
            raise UnknownTransaction.for_transaction(transaction)
        return original

    def _handle_deposit(self, transaction: Transaction, id_taken: bool) -> None:
        amount = self._new_record_amount(transaction, id_taken)

        self.credit(amount)
        self._store(transaction, amount)

    def _handle_withdrawal(self, transaction: Transaction, id_taken: bool) -> None:
        amount = self._new_record_amount(transaction, id_taken)

        if self.available < amount:
            raise InsufficientFunds.for_transaction(transaction, amount)

        self.debit(amount)
        self._store(transaction, amount)

    def _handle_dispute(self, transaction: Transaction) -> None:
        original = self._referenced(transaction)

        # Withdrawn funds have already left the account, there is nothing to hold
        if original.transaction_type != TransactionType.DEPOSIT:
            raise TransactionNotDisputable.for_transaction(transaction, original.amount)

        if original.state != TransactionState.NORMAL:
            raise TransactionAlreadyDisputed.for_transaction(transaction, original.amount)

        if self.available < original.amount:
            raise InsufficientFunds.for_transaction(transaction, original.amount)

        self.hold(original.amount)
        original.state = TransactionState.DISPUTED

    def _handle_resolve(self, transaction: Transaction) -> None:
        original = self._referenced(transaction)

        if not original.disputed:
            raise TransactionNotDisputed.for_transaction(transaction, original.amount)

        # Resolved transactions go back to normal and may be disputed again
        self.release_hold(original.amount)
        original.state = TransactionState.NORMAL

    def _handle_chargeback(self, transaction: Transaction) -> None:
        original = self._referenced(transaction)

        if not original.disputed:
            raise TransactionNotDisputed.for_transaction(transaction, original.amount)

        if self.held < original.amount:
            logger.error(
                f"Chargeback for tx {transaction.transaction_id}: held {self.held} is below disputed amount "
                f"{original.amount} for client {self.client_id}. This should never happen."
            )
            raise InsufficientHeldFunds.for_transaction(transaction, original.amount)

        self.remove_held(original.amount)
        self.locked = True
        original.state = TransactionState.CHARGED_BACK
