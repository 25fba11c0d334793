"""Billing bounded context: subscription charge orchestration.

Charges stored payment methods for checkout and subscription renewals,
keeps processor customer records per platform user, and reports outcomes
back to the host platform's order ledger.
"""

from protean.domain import Domain

from billing.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

billing = Domain(name="billing")
