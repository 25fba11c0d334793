"""Processor client port (abstract interface).

Defines the contract every payment processor adapter implements, so the
orchestrator can run against FakeProcessor (dev/test) or StripeProcessor
(production) without changes.
"""

from abc import ABC, abstractmethod
from typing import Any

from billing.charging.models import ChargeRequest


class ProcessorClient(ABC):
    """Abstract processor interface.

    Both calls return the processor's charge object as a plain mapping and
    raise ``ProcessorRequestError`` on network failures and rejections.
    """

    @abstractmethod
    def create_charge(self, request: ChargeRequest) -> dict[str, Any]:
        """Create (and optionally capture) a charge."""
        ...

    @abstractmethod
    def capture_charge(self, charge_id: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Capture a previously authorized charge."""
        ...
