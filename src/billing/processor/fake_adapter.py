"""Configurable fake processor for development and testing.

Simulates the processor without any network calls. It can be told to
succeed, to answer without a charge id, or to raise, and it records every
call it receives.
"""

from typing import Any
from uuid import uuid4

from billing.charging.models import ChargeRequest
from billing.errors import ProcessorRequestError
from billing.processor.port import ProcessorClient

SUCCEED = "succeed"
NO_ID = "no_id"
RAISE = "raise"


class FakeProcessor(ProcessorClient):
    """Configurable fake processor."""

    def __init__(self) -> None:
        self.behaviour: str = SUCCEED
        self.failure_reason: str = "Your card was declined."
        self.charge_id: str | None = None
        self.calls: list[dict] = []

    def configure(
        self,
        behaviour: str = SUCCEED,
        failure_reason: str = "Your card was declined.",
        charge_id: str | None = None,
    ) -> None:
        """Configure processor behaviour at runtime."""
        if behaviour not in (SUCCEED, NO_ID, RAISE):
            raise ValueError(f"Unknown fake processor behaviour: {behaviour}")
        self.behaviour = behaviour
        self.failure_reason = failure_reason
        self.charge_id = charge_id

    def create_charge(self, request: ChargeRequest) -> dict[str, Any]:
        params = request.to_params()
        self.calls.append({"method": "create_charge", "request": request, "params": params})

        if self.behaviour == RAISE:
            raise ProcessorRequestError(self.failure_reason, http_status=402, code="card_declined")
        if self.behaviour == NO_ID:
            return {"object": "charge", "status": "failed", "failure_message": self.failure_reason}
        return {
            "id": self.charge_id or f"ch_fake_{uuid4().hex[:12]}",
            "object": "charge",
            "amount": request.amount,
            "currency": request.currency,
            "customer": request.customer_id,
            "captured": request.capture,
            "status": "succeeded",
        }

    def capture_charge(self, charge_id: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        params = dict(params or {})
        self.calls.append({"method": "capture_charge", "charge_id": charge_id, "params": params})

        if self.behaviour == RAISE:
            raise ProcessorRequestError(self.failure_reason, http_status=400, code="charge_expired_for_capture")
        charge = {"id": charge_id, "object": "charge", "captured": True, "status": "succeeded"}
        if "amount" in params:
            charge["amount_captured"] = params["amount"]
        return charge
