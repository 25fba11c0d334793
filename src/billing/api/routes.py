"""FastAPI routes for the Billing domain.

The host platform calls these from its own checkout, scheduler and
order-status code. Routes need a ``ChargeOrchestrator``; applications
provide one by overriding the ``get_orchestrator`` dependency.
"""

from fastapi import APIRouter, Depends, HTTPException
from protean.exceptions import ValidationError

from billing.api.schemas import (
    CaptureRequest,
    CaptureResponse,
    CardFormErrors,
    CheckoutRequest,
    CheckoutResponse,
    ClientConfigResponse,
    CustomerRecordResponse,
    PaymentMethodSchema,
    RenewalRequest,
    SavePaymentMethodRequest,
    StatusResponse,
    ValidationResponse,
)
from billing.charging.orchestrator import ChargeOrchestrator
from billing.checkout.validation import validate_card_form
from billing.errors import (
    CustomerNotFoundError,
    InvalidAmountError,
    OneOffCheckoutUnavailableError,
    ProcessorRequestError,
)
from billing.notices import ERROR, InMemoryNotices


def get_orchestrator() -> ChargeOrchestrator:
    """Placeholder dependency; applications override it at startup."""
    raise HTTPException(status_code=503, detail="Billing is not configured")


billing_router = APIRouter(prefix="/billing", tags=["billing"])


def _require_saved_cards(orchestrator: ChargeOrchestrator) -> None:
    if not orchestrator.config.saved_cards:
        raise HTTPException(status_code=403, detail="Saved cards are disabled")


def _record_response(record) -> CustomerRecordResponse:
    return CustomerRecordResponse(
        user_id=record.user_id,
        payment_methods=[
            PaymentMethodSchema(
                method_id=m.method_id,
                last4=m.last4,
                expiry_month=m.expiry_month,
                expiry_year=m.expiry_year,
                is_default=m.method_id == record.default_payment_method_id,
            )
            for m in record.ordered_methods()
        ],
    )


@billing_router.post("/checkout", response_model=CheckoutResponse)
async def complete_checkout(
    body: CheckoutRequest,
    orchestrator: ChargeOrchestrator = Depends(get_orchestrator),
) -> CheckoutResponse:
    """Charge the initial payment of a subscription order."""
    notices = InMemoryNotices()
    try:
        result = orchestrator.complete_checkout_charge(
            body.order.to_context(),
            chosen_method=body.chosen_method,
            notices=notices,
        )
    except OneOffCheckoutUnavailableError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return CheckoutResponse(
        result=result.status.value,
        redirect=result.redirect_url,
        messages=notices.of_kind(ERROR),
    )


@billing_router.post("/checkout/validate", response_model=ValidationResponse)
async def validate_checkout_form(body: CardFormErrors) -> ValidationResponse:
    """Turn client-side card field errors into checkout notices."""
    notices = InMemoryNotices()
    added = validate_card_form(body.model_dump(by_alias=True), notices)
    return ValidationResponse(
        result="failure" if added else "success",
        messages=notices.of_kind(ERROR),
    )


@billing_router.post("/renewals", status_code=202, response_model=StatusResponse)
async def scheduled_renewal(
    body: RenewalRequest,
    orchestrator: ChargeOrchestrator = Depends(get_orchestrator),
) -> StatusResponse:
    """Bill a renewal period. The outcome is written to the ledger."""
    orchestrator.handle_scheduled_renewal(
        body.amount_to_charge,
        body.order.to_context(is_renewal=True),
        body.product_id,
    )
    return StatusResponse(status="processed")


@billing_router.post("/orders/{order_id}/capture", response_model=CaptureResponse)
async def capture_order(
    order_id: str,
    body: CaptureRequest,
    orchestrator: ChargeOrchestrator = Depends(get_orchestrator),
) -> CaptureResponse:
    """Capture the held authorization of a completed order."""
    try:
        charge = orchestrator.capture_on_completion(order_id, body.amount)
    except InvalidAmountError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except ProcessorRequestError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc

    if charge is None:
        return CaptureResponse(status="nothing_to_capture")
    return CaptureResponse(status="captured", charge_id=charge.get("id"))


@billing_router.get("/customers/{user_id}", response_model=CustomerRecordResponse)
async def get_customer(
    user_id: str,
    orchestrator: ChargeOrchestrator = Depends(get_orchestrator),
) -> CustomerRecordResponse:
    _require_saved_cards(orchestrator)
    record = orchestrator.customers.get_customer_record(user_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"No saved cards for user {user_id}")
    return _record_response(record)


@billing_router.delete("/customers/{user_id}/payment-methods/{index}", response_model=CustomerRecordResponse)
async def delete_payment_method(
    user_id: str,
    index: int,
    orchestrator: ChargeOrchestrator = Depends(get_orchestrator),
) -> CustomerRecordResponse:
    """Delete a saved card by its position in the user's list."""
    _require_saved_cards(orchestrator)
    try:
        record = orchestrator.customers.delete_payment_method(user_id, index)
    except CustomerNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValidationError as exc:
        raise HTTPException(status_code=404, detail=exc.messages) from exc
    return _record_response(record)


@billing_router.post("/customers/{user_id}/payment-methods", status_code=201, response_model=CustomerRecordResponse)
async def save_payment_method(
    user_id: str,
    body: SavePaymentMethodRequest,
    orchestrator: ChargeOrchestrator = Depends(get_orchestrator),
) -> CustomerRecordResponse:
    """Store a card the processor tokenized for this user.

    Subscriptions are charged off-session, so this stays open when saved
    cards are turned off for shoppers.
    """
    try:
        record = orchestrator.customers.save_tokenized_card(
            user_id,
            body.customer_id,
            body.method_id,
            last4=body.last4,
            expiry_month=body.expiry_month,
            expiry_year=body.expiry_year,
            make_default=body.make_default,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=409, detail=exc.messages) from exc
    return _record_response(record)


@billing_router.get("/config", response_model=ClientConfigResponse)
async def client_config(
    orchestrator: ChargeOrchestrator = Depends(get_orchestrator),
) -> ClientConfigResponse:
    """Settings the browser needs to tokenize cards with the processor."""
    config = orchestrator.config
    return ClientConfigResponse(
        mode=config.mode,
        publishable_key=config.publishable_key,
        currency=config.charge_currency,
        saved_cards=config.saved_cards,
    )
