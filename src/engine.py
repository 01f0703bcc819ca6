import csv
import logging
from typing import Dict, Iterable, Optional, TextIO

from errors import ProcessingError
from ledger import Ledger
from models import (
    MAX_CLIENT_ID,
    MAX_TRANSACTION_ID,
    AccountSnapshot,
    ProcessingStats,
    Transaction,
    TransactionType,
    to_money,
)

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Replays a CSV transaction log against a Ledger, strictly in file order.
    Rejected and unparseable rows are logged and skipped.
    """

    def __init__(self, ledger: Optional[Ledger] = None):
        self._ledger = ledger if ledger is not None else Ledger()
        self._stats = ProcessingStats()

    @property
    def ledger(self) -> Ledger:
        return self._ledger

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def process_file(self, filepath: str) -> Dict[int, AccountSnapshot]:
        """Process CSV file and return final account states."""
        with open(filepath, "r", newline="") as f:
            return self.process_stream(f)

    def process_stream(self, stream: TextIO) -> Dict[int, AccountSnapshot]:
        return self.process_rows(csv.DictReader(stream))

    def process_rows(self, rows: Iterable[Dict[str, str]]) -> Dict[int, AccountSnapshot]:
        logger.info("Starting processing")

        for row in rows:
            transaction = self._parse_csv_row(row)
            if transaction is None:
                self._stats.record_unparseable()
                continue
            self.process_transaction(transaction)

        logger.info(
            f"Processed: {self._stats.applied}, "
            f"Rejected: {self._stats.rejected}, "
            f"Unparseable: {self._stats.unparseable}"
        )

        return self._ledger.get_all_accounts()

    def process_transaction(self, transaction: Transaction) -> Optional[ProcessingError]:
        """Apply one event; returns the rejection, if any, after logging it."""
        try:
            self._ledger.apply(transaction)
        except ProcessingError as e:
            self._stats.record_failure()
            logger.warning(f"Rejected {e}")
            return e

        self._stats.record_success()
        return None

    def _parse_csv_row(self, row: Dict[str, str]) -> Optional[Transaction]:
        """Parse CSV row into Transaction."""
        try:
            normalized = {k.strip(): (v or "").strip() for k, v in row.items() if k is not None}

            transaction_type = TransactionType(normalized["type"].lower())
            client_id = int(normalized["client"])
            transaction_id = int(normalized["tx"])

            if not 0 <= client_id <= MAX_CLIENT_ID:
                raise ValueError(f"client id {client_id} out of range")
            if not 0 <= transaction_id <= MAX_TRANSACTION_ID:
                raise ValueError(f"tx id {transaction_id} out of range")

            # Disputes, resolves and chargebacks take the amount of the referenced transaction
            amount = None
            if transaction_type.creates_record:
                amount_str = normalized.get("amount", "")
                if not amount_str:
                    raise ValueError(f"{transaction_type.value} requires an amount")
                amount = to_money(amount_str)

            return Transaction(
                transaction_type=transaction_type,
                client_id=client_id,
                transaction_id=transaction_id,
                amount=amount,
            )
        except (KeyError, ValueError) as e:
            logger.warning(f"Failed to parse row {row}: {e}")
            return None
