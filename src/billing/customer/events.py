"""Domain events for the CustomerRecord aggregate."""

from protean.fields import Boolean, DateTime, Identifier, String

from billing.domain import billing


@billing.event(part_of="CustomerRecord")
class CustomerRecordCreated:
    """A processor customer was linked to a platform user."""

    __version__ = 1

    record_id = Identifier(required=True)
    user_id = String(required=True)
    mode = String(required=True)
    customer_id = String(required=True)
    created_at = DateTime(required=True)


@billing.event(part_of="CustomerRecord")
class PaymentMethodAdded:
    __version__ = 1

    record_id = Identifier(required=True)
    user_id = String(required=True)
    method_id = String(required=True)
    last4 = String()
    is_default = Boolean(default=False)


@billing.event(part_of="CustomerRecord")
class PaymentMethodRemoved:
    __version__ = 1

    record_id = Identifier(required=True)
    user_id = String(required=True)
    method_id = String(required=True)
    new_default_payment_method_id = String()


@billing.event(part_of="CustomerRecord")
class DefaultPaymentMethodChanged:
    """The user picked a different card to be charged."""

    __version__ = 1

    record_id = Identifier(required=True)
    user_id = String(required=True)
    method_id = String(required=True)
    previous_method_id = String()
