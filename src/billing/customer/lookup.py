"""Customer record lookup: port and Protean repository adapter.

The orchestrator only ever reads and writes customer records through a
``CustomerRecordLookup``. The repository adapter keys records by user and
processor mode, so test-mode and live-mode customers never mix.
"""

from abc import ABC, abstractmethod

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from billing.config import TEST_MODE
from billing.customer.customer import CustomerRecord, record_key
from billing.domain import logger
from billing.errors import CustomerNotFoundError

_UPDATABLE_FIELDS = ("customer_id", "default_payment_method_id")


class CustomerRecordLookup(ABC):
    mode: str = TEST_MODE

    @abstractmethod
    def get_customer_record(self, user_id) -> CustomerRecord | None:
        """Return the user's record, or None if they never saved a card."""
        ...

    @abstractmethod
    def save(self, record: CustomerRecord) -> None: ...

    def update_customer_record(self, user_id, partial_fields: dict) -> CustomerRecord:
        """Apply ``partial_fields`` to an existing record and persist it."""
        unknown = set(partial_fields) - set(_UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update customer record fields: {sorted(unknown)}")

        record = self.require(user_id)
        if "customer_id" in partial_fields:
            record.change_customer_id(partial_fields["customer_id"])
        if "default_payment_method_id" in partial_fields:
            record.set_default_payment_method(partial_fields["default_payment_method_id"])
        self.save(record)
        return record

    def require(self, user_id) -> CustomerRecord:
        record = self.get_customer_record(user_id)
        if record is None:
            raise CustomerNotFoundError(user_id)
        return record

    def choose_default(self, user_id, index: int) -> CustomerRecord:
        """Make the saved method at ``index`` the one charged by default."""
        record = self.require(user_id)
        method = record.method_at(index)
        return self.update_customer_record(user_id, {"default_payment_method_id": method.method_id})

    def save_tokenized_card(
        self,
        user_id,
        customer_id: str,
        method_id: str,
        last4=None,
        expiry_month=None,
        expiry_year=None,
        make_default: bool = False,
    ) -> CustomerRecord:
        """Store a card the processor just tokenized for ``customer_id``.

        The user's first card creates their record and becomes the default.
        Later cards are appended; a changed customer id replaces the stored one.
        """
        record = self.get_customer_record(user_id)
        if record is None:
            record = CustomerRecord.register(
                user_id,
                customer_id,
                mode=self.mode,
                method_id=method_id,
                last4=last4,
                expiry_month=expiry_month,
                expiry_year=expiry_year,
            )
            logger.info("customer_record_created", user_id=str(user_id), customer_id=customer_id)
        else:
            if record.customer_id != customer_id:
                record.change_customer_id(customer_id)
            record.add_payment_method(method_id, last4, expiry_month, expiry_year, make_default=make_default)
        self.save(record)
        logger.info("payment_method_saved", user_id=str(user_id), method_id=method_id)
        return record

    def delete_payment_method(self, user_id, index: int) -> CustomerRecord:
        record = self.require(user_id)
        removed = record.remove_payment_method(index)
        self.save(record)
        logger.info("payment_method_deleted", user_id=str(user_id), method_id=removed.method_id)
        return record


class RepositoryCustomerLookup(CustomerRecordLookup):
    """Reads and writes CustomerRecord aggregates in the active domain."""

    def __init__(self, mode: str = TEST_MODE) -> None:
        self.mode = mode

    def get_customer_record(self, user_id) -> CustomerRecord | None:
        try:
            return current_domain.repository_for(CustomerRecord).get(record_key(user_id, self.mode))
        except ObjectNotFoundError:
            return None

    def save(self, record: CustomerRecord) -> None:
        if record.mode != self.mode:
            raise ValueError(f"Record is for {record.mode} mode, lookup is for {self.mode} mode")
        current_domain.repository_for(CustomerRecord).add(record)
