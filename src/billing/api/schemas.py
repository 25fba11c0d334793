"""Pydantic request/response schemas for the Billing API.

These are the external contracts the host platform calls with; they are
translated to ``OrderContext`` before reaching the orchestrator.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from billing.charging.models import OrderContext


class OrderContextSchema(BaseModel):
    order_id: str
    user_id: str | None = None
    contains_subscription: bool = True
    amount_due: Decimal | None = Field(default=None, ge=0)
    capture: bool = True

    def to_context(self, is_renewal: bool = False) -> OrderContext:
        return OrderContext(
            order_id=self.order_id,
            user_id=self.user_id,
            contains_subscription=self.contains_subscription,
            amount_due=self.amount_due,
            capture=self.capture,
            is_renewal=is_renewal,
        )


class CheckoutRequest(BaseModel):
    order: OrderContextSchema
    chosen_method: int | None = Field(default=None, ge=0)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "order": {
                        "order_id": "1042",
                        "user_id": "7",
                        "contains_subscription": True,
                        "amount_due": "49.99",
                    },
                    "chosen_method": 0,
                }
            ]
        }
    }


class CheckoutResponse(BaseModel):
    result: str
    redirect: str | None = None
    messages: list[str] = []


class RenewalRequest(BaseModel):
    amount_to_charge: Decimal = Field(ge=0)
    order: OrderContextSchema
    product_id: str

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "amount_to_charge": "19.00",
                    "order": {"order_id": "1042", "user_id": "7", "contains_subscription": True},
                    "product_id": "88",
                }
            ]
        }
    }


class CaptureRequest(BaseModel):
    amount: Decimal | None = Field(default=None, gt=0)


class CaptureResponse(BaseModel):
    status: str
    charge_id: str | None = None


class CardFormErrors(BaseModel):
    card_number: str | None = Field(default=None, alias="card-number")
    card_expiry: str | None = Field(default=None, alias="card-expiry")
    card_cvc: str | None = Field(default=None, alias="card-cvc")

    model_config = {"populate_by_name": True}


class ValidationResponse(BaseModel):
    result: str
    messages: list[str]


class PaymentMethodSchema(BaseModel):
    method_id: str
    last4: str | None = None
    expiry_month: int | None = None
    expiry_year: int | None = None
    is_default: bool = False


class CustomerRecordResponse(BaseModel):
    user_id: str
    payment_methods: list[PaymentMethodSchema]


class SavePaymentMethodRequest(BaseModel):
    customer_id: str = Field(min_length=1)
    method_id: str = Field(min_length=1)
    last4: str | None = Field(default=None, max_length=4)
    expiry_month: int | None = Field(default=None, ge=1, le=12)
    expiry_year: int | None = None
    make_default: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "cus_1",
                    "method_id": "card_2",
                    "last4": "4242",
                    "expiry_month": 12,
                    "expiry_year": 2030,
                    "make_default": True,
                }
            ]
        }
    }


class ClientConfigResponse(BaseModel):
    mode: str
    publishable_key: str
    currency: str
    saved_cards: bool


class StatusResponse(BaseModel):
    status: str
