"""CustomerRecord aggregate with the PaymentMethodSummary entity.

One record per platform user and processor mode. It holds the
processor-assigned customer id, the saved payment methods in display order,
and which of them is charged by default.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from billing.config import TEST_MODE
from billing.domain import billing


def record_key(user_id, mode: str) -> str:
    """Identity of the record for a user in a processor mode."""
    return f"{mode}:{user_id}"


@billing.entity(part_of="CustomerRecord")
class PaymentMethodSummary:
    """A saved card, as much of it as may be stored on our side."""

    method_id = String(required=True, max_length=255)
    last4 = String(max_length=4)
    expiry_month = Integer(min_value=1, max_value=12)
    expiry_year = Integer()
    position = Integer(default=0)


@billing.aggregate
class CustomerRecord:
    """The processor customer behind a platform user."""

    record_id = Identifier(identifier=True, required=True)
    user_id = String(required=True, max_length=255)
    mode = String(max_length=10, default=TEST_MODE)
    customer_id = String(required=True, max_length=255)
    default_payment_method_id = String(max_length=255)
    payment_methods = HasMany(PaymentMethodSummary)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def default_method_must_be_saved(self):
        if not self.payment_methods or not self.default_payment_method_id:
            return
        if self.default_payment_method_id not in {m.method_id for m in self.payment_methods}:
            raise ValidationError({"default_payment_method_id": ["Default payment method is not a saved method"]})

    @classmethod
    def register(
        cls, user_id, customer_id, mode=TEST_MODE, method_id=None, last4=None, expiry_month=None, expiry_year=None
    ):
        """Create the record after the first successful tokenization."""
        from billing.customer.events import CustomerRecordCreated

        now = datetime.now(UTC)
        record = cls(
            record_id=record_key(user_id, mode),
            user_id=str(user_id),
            mode=mode,
            customer_id=customer_id,
            created_at=now,
            updated_at=now,
        )
        record.raise_(
            CustomerRecordCreated(
                record_id=record.record_id,
                user_id=record.user_id,
                mode=mode,
                customer_id=customer_id,
                created_at=now,
            )
        )
        if method_id:
            record.add_payment_method(method_id, last4, expiry_month, expiry_year, make_default=True)
        return record

    def ordered_methods(self) -> list:
        return sorted(self.payment_methods, key=lambda m: m.position)

    def method_at(self, index: int):
        methods = self.ordered_methods()
        if index < 0 or index >= len(methods):
            raise ValidationError({"payment_methods": [f"No saved payment method at position {index}"]})
        return methods[index]

    def add_payment_method(self, method_id, last4=None, expiry_month=None, expiry_year=None, make_default=False):
        from billing.customer.events import PaymentMethodAdded

        if any(m.method_id == method_id for m in self.payment_methods):
            raise ValidationError({"payment_methods": [f"Payment method {method_id} is already saved"]})

        # The first saved method is always the default
        if not self.payment_methods:
            make_default = True

        next_position = max((m.position for m in self.payment_methods), default=-1) + 1
        with atomic_change(self):
            self.add_payment_methods(
                PaymentMethodSummary(
                    method_id=method_id,
                    last4=last4,
                    expiry_month=expiry_month,
                    expiry_year=expiry_year,
                    position=next_position,
                )
            )
            if make_default:
                self.default_payment_method_id = method_id
            self.updated_at = datetime.now(UTC)

        self.raise_(
            PaymentMethodAdded(
                record_id=self.record_id,
                user_id=self.user_id,
                method_id=method_id,
                last4=last4,
                is_default=make_default,
            )
        )

    def remove_payment_method(self, index: int):
        """Forget the saved method at ``index`` in display order."""
        from billing.customer.events import PaymentMethodRemoved

        method = self.method_at(index)
        was_default = method.method_id == self.default_payment_method_id

        with atomic_change(self):
            self.remove_payment_methods(method)
            if was_default:
                remaining = self.ordered_methods()
                self.default_payment_method_id = remaining[0].method_id if remaining else None
            self.updated_at = datetime.now(UTC)

        self.raise_(
            PaymentMethodRemoved(
                record_id=self.record_id,
                user_id=self.user_id,
                method_id=method.method_id,
                new_default_payment_method_id=self.default_payment_method_id,
            )
        )
        return method

    def set_default_payment_method(self, method_id):
        from billing.customer.events import DefaultPaymentMethodChanged

        if method_id not in {m.method_id for m in self.payment_methods}:
            raise ValidationError({"payment_methods": [f"Payment method {method_id} is not saved"]})
        if method_id == self.default_payment_method_id:
            return

        previous = self.default_payment_method_id
        self.default_payment_method_id = method_id
        self.updated_at = datetime.now(UTC)
        self.raise_(
            DefaultPaymentMethodChanged(
                record_id=self.record_id,
                user_id=self.user_id,
                method_id=method_id,
                previous_method_id=previous,
            )
        )

    def change_customer_id(self, customer_id):
        self.customer_id = customer_id
        self.updated_at = datetime.now(UTC)
