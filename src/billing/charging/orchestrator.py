"""Charge orchestration for checkout, renewals and deferred capture.

The orchestrator decides how much to charge and against which stored card,
asks the processor to do it, and reports the result to the ledger. It never
retries: failed renewals go back to the platform's scheduler, failed
checkouts back to the shopper.

Entry points:
    complete_checkout_charge  - a shopper submits an order with subscriptions
    handle_scheduled_renewal  - the billing scheduler bills a new period
    capture_on_completion     - an authorized order is marked completed
"""

from collections.abc import Callable, Mapping, Sequence
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from protean.exceptions import ValidationError

from billing.charging.models import (
    PROTECTED_FIELDS,
    ChargeOutcome,
    ChargeRequest,
    CheckoutResult,
    CheckoutStatus,
    Failure,
    OrderContext,
    Success,
)
from billing.config import BillingConfig
from billing.customer.customer import CustomerRecord
from billing.customer.lookup import CustomerRecordLookup
from billing.domain import logger
from billing.errors import (
    BillingError,
    CustomerNotFoundError,
    InvalidAmountError,
    LedgerInconsistencyError,
    OneOffCheckoutUnavailableError,
    ProcessorRequestError,
)
from billing.ledger.port import Ledger
from billing.notices import ERROR, InMemoryNotices, NoticeQueue
from billing.processor.port import ProcessorClient
from billing.utils.logging import charge_context

GENERIC_CHECKOUT_ERROR = "Transaction Error: Could not complete your subscription payment."
ADD_CARD_MESSAGE = "Please add a credit card to pay for your subscription."
CHOOSE_CARD_MESSAGE = "Please choose one of your saved cards."

ChargeExtension = Callable[[OrderContext], Mapping[str, Any] | None]
OneOffCheckout = Callable[[OrderContext], CheckoutResult]


def to_decimal(amount) -> Decimal:
    """Validate a major-unit amount. Negative or non-numeric amounts are rejected."""
    if isinstance(amount, bool):
        raise InvalidAmountError(amount)
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidAmountError(amount) from exc
    if not value.is_finite() or value < 0:
        raise InvalidAmountError(amount)
    return value


def to_minor_units(amount: Decimal) -> int:
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class ChargeOrchestrator:
    def __init__(
        self,
        config: BillingConfig,
        processor: ProcessorClient,
        customers: CustomerRecordLookup,
        ledger: Ledger,
        extensions: Sequence[ChargeExtension] = (),
        one_off_checkout: OneOffCheckout | None = None,
    ) -> None:
        self.config = config
        self.processor = processor
        self.customers = customers
        self.ledger = ledger
        self.extensions: list[ChargeExtension] = list(extensions)
        self.one_off_checkout = one_off_checkout

    def add_extension(self, extension: ChargeExtension) -> None:
        """Register a callable that contributes extra processor fields."""
        self.extensions.append(extension)

    # -------------------------------------------------------------------
    # Core charge
    # -------------------------------------------------------------------
    def charge_for_order(self, order_context: OrderContext, explicit_amount=None) -> ChargeOutcome:
        """Charge the order owner's default card.

        ``explicit_amount`` is in major units; when omitted the order's amount
        due is charged. A zero amount succeeds without contacting the
        processor (fully discounted periods, free trials).

        Raises InvalidAmountError, LedgerInconsistencyError and
        CustomerNotFoundError before any processor call. Processor failures
        come back as ``Failure``.
        """
        with charge_context(order_id=str(order_context.order_id)):
            amount = self._resolve_amount(order_context, explicit_amount)
            if amount == 0:
                # Nothing to charge is treated as paid. This can also hide an
                # upstream total that was computed as zero by mistake.
                logger.info("charge_skipped_zero_amount")
                return Success()

            record = self._customer_for(order_context)
            request = self.build_request(order_context, record, amount)

            try:
                response = self.processor.create_charge(request)
            except ProcessorRequestError as exc:
                logger.warning("charge_failed", reason=str(exc), http_status=exc.http_status, code=exc.code)
                return Failure(reason=str(exc))

            charge_id = (response or {}).get("id")
            if not charge_id:
                reason = (response or {}).get("failure_message") or "Processor returned no charge id"
                logger.warning("charge_failed", reason=reason)
                return Failure(reason=reason)

            self.ledger.add_note(order_context.order_id, f"Subscription paid ({charge_id})")
            self.ledger.record_transaction(order_context.order_id, charge_id, capture_pending=not request.capture)
            logger.info("charge_succeeded", charge_id=charge_id, amount=request.amount, currency=request.currency)
            return Success(charge_id=charge_id, raw=response)

    def build_request(self, order_context: OrderContext, record: CustomerRecord, amount: Decimal) -> ChargeRequest:
        """Assemble the charge, letting extensions add fields first."""
        minor = to_minor_units(amount)
        if minor <= 0:
            raise InvalidAmountError(amount)

        extra: dict[str, Any] = {}
        for extension in self.extensions:
            for key, value in (extension(order_context) or {}).items():
                if key in PROTECTED_FIELDS:
                    name = getattr(extension, "__name__", repr(extension))
                    logger.warning("extension_field_dropped", field=key, extension=name)
                    continue
                extra[key] = value

        return ChargeRequest(
            extra=extra,
            description=self.config.description_for(order_context.order_id, renewal=order_context.is_renewal),
            capture=order_context.capture,
            customer_id=record.customer_id,
            payment_method_id=record.default_payment_method_id,
            currency=self.config.charge_currency,
            amount=minor,
        )

    def _resolve_amount(self, order_context: OrderContext, explicit_amount) -> Decimal:
        if explicit_amount is not None:
            return to_decimal(explicit_amount)
        if order_context.amount_due is not None:
            return to_decimal(order_context.amount_due)
        return to_decimal(self.ledger.get_amount_due(order_context.order_id))

    def _customer_for(self, order_context: OrderContext) -> CustomerRecord:
        if order_context.user_id in (None, ""):
            raise LedgerInconsistencyError(order_context.order_id)

        record = self.customers.get_customer_record(order_context.user_id)
        if record is None or not record.default_payment_method_id:
            raise CustomerNotFoundError(order_context.user_id)
        return record

    # -------------------------------------------------------------------
    # Entry points
    # -------------------------------------------------------------------
    def handle_scheduled_renewal(self, amount_due, order_context: OrderContext, product_id) -> None:
        """Bill one renewal period and report pass/fail to the ledger."""
        renewal = replace(order_context, is_renewal=True, capture=True)
        try:
            outcome = self.charge_for_order(renewal, amount_due)
        except BillingError as exc:
            logger.warning(
                "renewal_charge_error",
                order_id=str(order_context.order_id),
                error_type=type(exc).__name__,
                reason=str(exc),
            )
            outcome = Failure(reason=str(exc))

        if outcome.succeeded:
            self.ledger.mark_renewal_paid(order_context.order_id)
        else:
            logger.warning("renewal_failed", order_id=str(order_context.order_id), product_id=str(product_id))
            self.ledger.mark_renewal_failed(order_context.order_id, product_id)

    def complete_checkout_charge(
        self,
        order_context: OrderContext,
        chosen_method: int | None = None,
        notices: NoticeQueue | None = None,
    ) -> CheckoutResult:
        """Charge the initial payment of an order that contains subscriptions.

        Orders without subscriptions go to the one-off checkout path.
        ``chosen_method`` is a saved-card position the shopper picked; it
        becomes their default before charging. It is ignored when saved
        cards are turned off.

        Raises OneOffCheckoutUnavailableError for an order without
        subscriptions when no one-off checkout was wired in.
        """
        if not order_context.contains_subscription:
            if self.one_off_checkout is None:
                raise OneOffCheckoutUnavailableError(order_context.order_id)
            return self.one_off_checkout(order_context)

        if chosen_method is not None and not self.config.saved_cards:
            logger.info("saved_card_choice_ignored", order_id=str(order_context.order_id))
            chosen_method = None

        notices = notices if notices is not None else InMemoryNotices()
        try:
            if chosen_method is not None:
                self.customers.choose_default(order_context.user_id, chosen_method)
            outcome = self.charge_for_order(order_context)
        except CustomerNotFoundError as exc:
            notices.add(ADD_CARD_MESSAGE, ERROR)
            outcome = Failure(reason=str(exc))
        except ValidationError as exc:
            logger.warning("checkout_card_choice_invalid", order_id=str(order_context.order_id), errors=exc.messages)
            notices.add(CHOOSE_CARD_MESSAGE, ERROR)
            outcome = Failure(reason="Invalid saved card choice")
        except (InvalidAmountError, LedgerInconsistencyError) as exc:
            logger.error(
                "checkout_charge_error",
                order_id=str(order_context.order_id),
                error_type=type(exc).__name__,
                reason=str(exc),
            )
            outcome = Failure(reason=str(exc))

        if outcome.succeeded:
            self.ledger.mark_complete(order_context.order_id)
            self.ledger.activate_subscriptions(order_context.order_id)
            return CheckoutResult(
                status=CheckoutStatus.SUCCESS,
                redirect_url=self.config.return_url_for(order_context.order_id),
            )

        self.ledger.mark_payment_failed(order_context.order_id)
        # Only one generic message, and only when nothing more specific was queued
        if notices.count(ERROR) == 0:
            notices.add(GENERIC_CHECKOUT_ERROR, ERROR)
        return CheckoutResult(status=CheckoutStatus.FAILURE)

    def capture_on_completion(self, order_id, amount=None) -> dict[str, Any] | None:
        """Capture a held authorization when its order is completed.

        ``amount`` optionally overrides the captured amount, in minor units,
        and must round to at least one unit.
        Returns the processor's charge, or None when nothing was held.
        """
        transaction = self.ledger.get_transaction(order_id)
        if transaction is None or not transaction.capture_pending:
            return None

        params: dict[str, Any] = {}
        if amount is not None:
            override = int(to_decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
            if override <= 0:
                raise InvalidAmountError(amount)
            params["amount"] = override

        with charge_context(order_id=str(order_id)):
            charge = self.processor.capture_charge(transaction.transaction_id, params)
            self.ledger.mark_captured(order_id)
            self.ledger.add_note(order_id, f"Charge captured ({transaction.transaction_id})")
            logger.info("charge_captured", charge_id=transaction.transaction_id, amount=params.get("amount"))
        return charge
