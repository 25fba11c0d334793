"""Value objects exchanged between the orchestrator and its collaborators."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any

# Request keys the orchestrator owns. Extension contributions under any of
# these names are discarded.
CHARGE_FIELDS = frozenset(
    {
        "amount",
        "currency",
        "customer",
        "customer_id",
        "payment_method",
        "payment_method_id",
        "source",
        "card",
        "description",
        "capture",
    }
)

# Processor SDK request options. They travel beside the charge parameters,
# so an extension must never be able to set them.
REQUEST_OPTIONS = frozenset(
    {
        "api_key",
        "api_base",
        "api_version",
        "stripe_account",
        "stripe_version",
        "idempotency_key",
        "max_network_retries",
        "headers",
        "params",
    }
)

PROTECTED_FIELDS = CHARGE_FIELDS | REQUEST_OPTIONS


@dataclass(frozen=True)
class OrderContext:
    """Read-only view of an order, as far as charging is concerned.

    ``amount_due`` is in major currency units. When it is ``None`` the
    orchestrator asks the ledger for it.
    """

    order_id: str
    user_id: str | None
    contains_subscription: bool = False
    amount_due: Decimal | None = None
    capture: bool = True
    is_renewal: bool = False


@dataclass(frozen=True)
class ChargeRequest:
    """A single charge sent to the processor. ``amount`` is in minor units."""

    amount: int
    currency: str
    customer_id: str
    payment_method_id: str
    description: str
    capture: bool = True
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    def to_params(self) -> dict[str, Any]:
        """Render processor parameters, protected fields last."""
        params = dict(self.extra)
        params["description"] = self.description
        params["capture"] = self.capture
        params["customer"] = self.customer_id
        params["source"] = self.payment_method_id
        params["amount"] = self.amount
        params["currency"] = self.currency
        return params


@dataclass(frozen=True)
class Success:
    """The processor assigned a charge id, or there was nothing to charge."""

    charge_id: str | None = None
    raw: Mapping[str, Any] | None = None

    succeeded = True


@dataclass(frozen=True)
class Failure:
    reason: str

    succeeded = False


ChargeOutcome = Success | Failure


class CheckoutStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class CheckoutResult:
    status: CheckoutStatus
    redirect_url: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status is CheckoutStatus.SUCCESS
