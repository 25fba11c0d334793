"""Stripe processor adapter.

Uses the stripe-python SDK's Charges API. The secret key from
``BillingConfig`` is passed on every request; the SDK's module-level
``stripe.api_key`` is never set.
"""

from typing import Any

import stripe

from billing.charging.models import REQUEST_OPTIONS, ChargeRequest
from billing.config import BillingConfig
from billing.domain import logger
from billing.errors import ProcessorRequestError
from billing.processor.port import ProcessorClient


def _as_dict(obj) -> dict[str, Any]:
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


class StripeProcessor(ProcessorClient):
    """Production Stripe adapter."""

    def __init__(self, config: BillingConfig) -> None:
        if not config.secret_key:
            raise ValueError(f"No Stripe secret key configured for {config.mode} mode")
        self.config = config

    @property
    def api_key(self) -> str:
        return self.config.secret_key

    def create_charge(self, request: ChargeRequest) -> dict[str, Any]:
        try:
            charge = stripe.Charge.create(api_key=self.api_key, **self._charge_params(request.to_params()))
        except stripe.StripeError as exc:
            raise self._request_error(exc, "create_charge") from exc
        return _as_dict(charge)

    def capture_charge(self, charge_id: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            charge = stripe.Charge.capture(charge_id, api_key=self.api_key, **self._charge_params(params or {}))
        except stripe.StripeError as exc:
            raise self._request_error(exc, "capture_charge") from exc
        return _as_dict(charge)

    def _charge_params(self, params: dict[str, Any]) -> dict[str, Any]:
        """Charge parameters only; request options come from the config."""
        dropped = sorted(set(params) & REQUEST_OPTIONS)
        if dropped:
            logger.warning("request_options_dropped", fields=dropped)
        return {k: v for k, v in params.items() if k not in REQUEST_OPTIONS}

    def _request_error(self, exc, operation: str) -> ProcessorRequestError:
        message = getattr(exc, "user_message", None) or str(exc) or "Processor request failed"
        http_status = getattr(exc, "http_status", None)
        code = getattr(exc, "code", None)
        logger.warning(
            "processor_request_failed",
            operation=operation,
            error_type=type(exc).__name__,
            http_status=http_status,
            code=code,
        )
        return ProcessorRequestError(message, http_status=http_status, code=code)
