"""Billing configuration.

A ``BillingConfig`` is built once by the host application and handed to the
processor client and the orchestrator. Nothing in the billing domain reads
process-wide settings on its own.
"""

import os
from dataclasses import dataclass

TEST_MODE = "test"
LIVE_MODE = "live"

DEFAULT_INITIAL_DESCRIPTION = "Order {order_id} (initial subscription payment)"
DEFAULT_RENEWAL_DESCRIPTION = "Order {order_id} (subscription renewal)"
DEFAULT_RETURN_URL = "/checkout/order-received/{order_id}"


def _flag(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "yes", "true", "on")


@dataclass(frozen=True)
class BillingConfig:
    """Processor credentials, store currency and message templates."""

    testmode: bool = True
    test_secret_key: str = ""
    test_publishable_key: str = ""
    live_secret_key: str = ""
    live_publishable_key: str = ""
    currency: str = "USD"
    saved_cards: bool = True
    processor_adapter: str = "fake"
    initial_description: str = DEFAULT_INITIAL_DESCRIPTION
    renewal_description: str = DEFAULT_RENEWAL_DESCRIPTION
    return_url: str = DEFAULT_RETURN_URL

    @property
    def mode(self) -> str:
        return TEST_MODE if self.testmode else LIVE_MODE

    @property
    def secret_key(self) -> str:
        return self.test_secret_key if self.testmode else self.live_secret_key

    @property
    def publishable_key(self) -> str:
        return self.test_publishable_key if self.testmode else self.live_publishable_key

    @property
    def charge_currency(self) -> str:
        return self.currency.lower()

    def description_for(self, order_id, renewal: bool) -> str:
        template = self.renewal_description if renewal else self.initial_description
        return template.format(order_id=order_id)

    def return_url_for(self, order_id) -> str:
        return self.return_url.format(order_id=order_id)

    @classmethod
    def from_env(cls, environ=None) -> "BillingConfig":
        """Build a config from ``BILLING_*`` environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            testmode=_flag(env.get("BILLING_TESTMODE"), True),
            test_secret_key=env.get("BILLING_TEST_SECRET_KEY", ""),
            test_publishable_key=env.get("BILLING_TEST_PUBLISHABLE_KEY", ""),
            live_secret_key=env.get("BILLING_LIVE_SECRET_KEY", ""),
            live_publishable_key=env.get("BILLING_LIVE_PUBLISHABLE_KEY", ""),
            currency=env.get("BILLING_CURRENCY", "USD"),
            saved_cards=_flag(env.get("BILLING_SAVED_CARDS"), True),
            processor_adapter=env.get("BILLING_PROCESSOR_ADAPTER", "fake"),
            initial_description=env.get("BILLING_INITIAL_DESCRIPTION", DEFAULT_INITIAL_DESCRIPTION),
            renewal_description=env.get("BILLING_RENEWAL_DESCRIPTION", DEFAULT_RENEWAL_DESCRIPTION),
            return_url=env.get("BILLING_RETURN_URL", DEFAULT_RETURN_URL),
        )
