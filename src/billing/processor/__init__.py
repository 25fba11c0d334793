"""Processor client factory.

``processor_for(config)`` picks the adapter named by
``config.processor_adapter``:
- ``fake``: FakeProcessor for development and testing
- ``stripe``: StripeProcessor for production
"""

from billing.config import BillingConfig
from billing.processor.fake_adapter import FakeProcessor
from billing.processor.port import ProcessorClient


def processor_for(config: BillingConfig) -> ProcessorClient:
    """Build the processor client the config asks for."""
    adapter = config.processor_adapter
    if adapter == "fake":
        return FakeProcessor()
    if adapter == "stripe":
        from billing.processor.stripe_adapter import StripeProcessor

        return StripeProcessor(config)
    raise ValueError(f"Unknown processor adapter: {adapter}")
