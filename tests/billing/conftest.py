from decimal import Decimal

import pytest
from billing.charging.models import OrderContext
from billing.charging.orchestrator import ChargeOrchestrator
from billing.config import BillingConfig
from billing.customer.customer import CustomerRecord
from billing.customer.lookup import RepositoryCustomerLookup
from billing.ledger.fake_adapter import FakeLedger
from billing.processor.fake_adapter import FakeProcessor
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def billing_bed():
    from billing.domain import billing

    bed = DomainFixture(billing)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(billing_bed):
    with billing_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        current_domain.event_store.store._data_reset()


@pytest.fixture()
def config():
    return BillingConfig(test_secret_key="sk_test_123", currency="USD")


@pytest.fixture()
def processor():
    return FakeProcessor()


@pytest.fixture()
def ledger():
    return FakeLedger()


@pytest.fixture()
def customers(config):
    return RepositoryCustomerLookup(mode=config.mode)


@pytest.fixture()
def orchestrator(config, processor, customers, ledger):
    return ChargeOrchestrator(config=config, processor=processor, customers=customers, ledger=ledger)


@pytest.fixture()
def saved_customer(customers):
    """User 7 with one saved card, pm_1, as the default."""
    record = CustomerRecord.register(
        user_id="7",
        customer_id="cus_1",
        method_id="pm_1",
        last4="4242",
        expiry_month=12,
        expiry_year=2030,
    )
    customers.save(record)
    return record


@pytest.fixture()
def subscription_order():
    return OrderContext(
        order_id="1042",
        user_id="7",
        contains_subscription=True,
        amount_due=Decimal("49.99"),
    )
