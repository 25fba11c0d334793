"""Orchestrator wiring for host applications.

``build_orchestrator(config, ...)`` assembles a ``ChargeOrchestrator`` from
the collaborators a host supplies, falling back to the processor named in
the config and, outside production, to an in-memory ledger.
"""

import os

from billing.charging.orchestrator import ChargeOrchestrator, OneOffCheckout
from billing.config import BillingConfig
from billing.customer.lookup import RepositoryCustomerLookup
from billing.ledger.fake_adapter import FakeLedger
from billing.ledger.port import Ledger
from billing.processor import processor_for
from billing.processor.port import ProcessorClient


def build_orchestrator(
    config: BillingConfig,
    ledger: Ledger | None = None,
    processor: ProcessorClient | None = None,
    one_off_checkout: OneOffCheckout | None = None,
) -> ChargeOrchestrator:
    """Wire the orchestrator from explicit collaborators.

    Without ``one_off_checkout``, orders that contain no subscriptions are
    refused at checkout.
    """
    if ledger is None:
        if os.environ.get("PROTEAN_ENV") == "production":
            raise ValueError("A ledger implementation is required in production")
        ledger = FakeLedger()
    return ChargeOrchestrator(
        config=config,
        processor=processor or processor_for(config),
        customers=RepositoryCustomerLookup(mode=config.mode),
        ledger=ledger,
        one_off_checkout=one_off_checkout,
    )
