"""In-memory ledger for development and testing.

Keeps order amounts, notes and transactions in dictionaries and records
every call, so tests can assert on exactly what the orchestrator reported.
"""

from collections import defaultdict
from decimal import Decimal

from billing.errors import LedgerInconsistencyError
from billing.ledger.port import Ledger, TransactionRecord


class FakeLedger(Ledger):
    def __init__(self) -> None:
        self.amounts_due: dict[str, Decimal] = {}
        self.notes: dict[str, list[str]] = defaultdict(list)
        self.transactions: dict[str, TransactionRecord] = {}
        self.calls: list[tuple] = []

    def set_amount_due(self, order_id, amount) -> None:
        self.amounts_due[str(order_id)] = Decimal(str(amount))

    def calls_to(self, method: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == method]

    def get_amount_due(self, order_id) -> Decimal:
        self.calls.append(("get_amount_due", order_id))
        try:
            return self.amounts_due[str(order_id)]
        except KeyError as exc:
            raise LedgerInconsistencyError(order_id, f"Order {order_id} is not in the ledger") from exc

    def add_note(self, order_id, text: str) -> None:
        self.calls.append(("add_note", order_id, text))
        self.notes[str(order_id)].append(text)

    def mark_complete(self, order_id) -> None:
        self.calls.append(("mark_complete", order_id))

    def mark_payment_failed(self, order_id) -> None:
        self.calls.append(("mark_payment_failed", order_id))

    def activate_subscriptions(self, order_id) -> None:
        self.calls.append(("activate_subscriptions", order_id))

    def mark_renewal_paid(self, order_id) -> None:
        self.calls.append(("mark_renewal_paid", order_id))

    def mark_renewal_failed(self, order_id, product_id) -> None:
        self.calls.append(("mark_renewal_failed", order_id, product_id))

    def record_transaction(self, order_id, transaction_id: str, capture_pending: bool) -> None:
        self.calls.append(("record_transaction", order_id, transaction_id, capture_pending))
        self.transactions[str(order_id)] = TransactionRecord(transaction_id, capture_pending)

    def get_transaction(self, order_id) -> TransactionRecord | None:
        return self.transactions.get(str(order_id))

    def mark_captured(self, order_id) -> None:
        self.calls.append(("mark_captured", order_id))
        record = self.transactions.get(str(order_id))
        if record is not None:
            self.transactions[str(order_id)] = TransactionRecord(record.transaction_id, capture_pending=False)
