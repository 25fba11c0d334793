"""Ledger port: the host platform's order and subscription state.

The billing domain never persists orders itself. It reads what it needs to
charge and reports every outcome through this interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class TransactionRecord:
    """The processor charge attached to an order."""

    transaction_id: str
    capture_pending: bool = False


class Ledger(ABC):
    @abstractmethod
    def get_amount_due(self, order_id) -> Decimal:
        """Amount still owed on the order, in major currency units.

        Raises LedgerInconsistencyError when the order is unknown.
        """
        ...

    @abstractmethod
    def add_note(self, order_id, text: str) -> None: ...

    @abstractmethod
    def mark_complete(self, order_id) -> None: ...

    @abstractmethod
    def mark_payment_failed(self, order_id) -> None: ...

    @abstractmethod
    def activate_subscriptions(self, order_id) -> None:
        """Activate every subscription bought with the order."""
        ...

    @abstractmethod
    def mark_renewal_paid(self, order_id) -> None:
        """Extend the subscription by one billing period."""
        ...

    @abstractmethod
    def mark_renewal_failed(self, order_id, product_id) -> None:
        """Hand the failure to the platform's retry/suspension policy."""
        ...

    @abstractmethod
    def record_transaction(self, order_id, transaction_id: str, capture_pending: bool) -> None: ...

    @abstractmethod
    def get_transaction(self, order_id) -> TransactionRecord | None: ...

    @abstractmethod
    def mark_captured(self, order_id) -> None: ...
