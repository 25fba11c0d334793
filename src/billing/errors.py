"""Billing error taxonomy.

None of these are retried by the orchestrator. Callers decide on user
messaging and on any scheduler-level retry.
"""


class BillingError(Exception):
    """Base class for billing failures."""


class CustomerNotFoundError(BillingError):
    """The user has no stored processor customer or default payment method."""

    def __init__(self, user_id) -> None:
        self.user_id = user_id
        super().__init__(f"No stored payment method for user {user_id}")


class InvalidAmountError(BillingError):
    """A caller passed a negative or non-numeric charge amount."""

    def __init__(self, amount) -> None:
        self.amount = amount
        super().__init__(f"Invalid charge amount: {amount!r}")


class ProcessorRequestError(BillingError):
    """The processor call failed at the network level or was rejected."""

    def __init__(self, message: str, http_status: int | None = None, code: str | None = None) -> None:
        self.http_status = http_status
        self.code = code
        super().__init__(message)


class LedgerInconsistencyError(BillingError):
    """An order is unknown to the ledger or has no resolvable owning user."""

    def __init__(self, order_id, message: str | None = None) -> None:
        self.order_id = order_id
        super().__init__(message or f"Order {order_id} has no resolvable owning user")


class OneOffCheckoutUnavailableError(BillingError):
    """An order without subscriptions arrived but no one-off checkout is wired."""

    def __init__(self, order_id) -> None:
        self.order_id = order_id
        super().__init__(f"Order {order_id} has no subscriptions and no one-off checkout is configured")
