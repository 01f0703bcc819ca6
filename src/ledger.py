from typing import Dict, Optional

from account import ClientAccount
from models import AccountSnapshot, Transaction


class Ledger:
    """
    Owns every client account and the ledger-wide transaction id index.
    All mutation goes through apply(), one event at a time.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        # transaction id -> client id, for deposits and withdrawals only
        self._transaction_owners: Dict[int, int] = {}

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create one with zero balances."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        return self._accounts.get(client_id)

    def get_transaction_owner(self, transaction_id: int) -> Optional[int]:
        """Return the client that created the transaction, if any."""
        return self._transaction_owners.get(transaction_id)

    def apply(self, transaction: Transaction) -> None:
        """
        Apply a single event to the account of its client.

        Raises a ProcessingError subclass when the event is rejected. A
        rejected event leaves every account unchanged.
        """
        account = self.get_or_create_account(transaction.client_id)

        account.apply(transaction, id_taken=transaction.transaction_id in self._transaction_owners)

        if transaction.transaction_type.creates_record:
            self._transaction_owners[transaction.transaction_id] = transaction.client_id

    def get_all_accounts(self) -> Dict[int, AccountSnapshot]:
        """Return a read-only snapshot of all accounts (for final output)."""
        return {client_id: account.snapshot() for client_id, account in self._accounts.items()}

    def __len__(self) -> int:
        return len(self._accounts)
