"""Tests for processor port/adapter integration."""

from unittest.mock import patch

import pytest
import stripe
from billing.charging.models import ChargeRequest
from billing.config import BillingConfig
from billing.errors import ProcessorRequestError
from billing.processor import processor_for
from billing.processor.fake_adapter import FakeProcessor
from billing.processor.stripe_adapter import StripeProcessor


def _request(**overrides):
    defaults = {
        "amount": 4999,
        "currency": "usd",
        "customer_id": "cus_1",
        "payment_method_id": "pm_1",
        "description": "Order 1042 (initial subscription payment)",
        "extra": {"statement_descriptor": "SHOP"},
    }
    defaults.update(overrides)
    return ChargeRequest(**defaults)


class TestFakeProcessor:
    def test_default_charge_succeeds(self):
        charge = FakeProcessor().create_charge(_request())
        assert charge["id"].startswith("ch_fake_")
        assert charge["amount"] == 4999

    def test_configured_charge_id(self):
        processor = FakeProcessor()
        processor.configure(charge_id="ch_1")
        assert processor.create_charge(_request())["id"] == "ch_1"

    def test_no_id_behaviour(self):
        processor = FakeProcessor()
        processor.configure(behaviour="no_id", failure_reason="Insufficient funds")
        charge = processor.create_charge(_request())
        assert "id" not in charge
        assert charge["failure_message"] == "Insufficient funds"

    def test_raise_behaviour(self):
        processor = FakeProcessor()
        processor.configure(behaviour="raise")
        with pytest.raises(ProcessorRequestError) as excinfo:
            processor.create_charge(_request())
        assert excinfo.value.http_status == 402

    def test_unknown_behaviour_rejected(self):
        with pytest.raises(ValueError):
            FakeProcessor().configure(behaviour="explode")

    def test_call_logging(self):
        processor = FakeProcessor()
        processor.create_charge(_request())
        processor.capture_charge("ch_1", {"amount": 100})
        assert [c["method"] for c in processor.calls] == ["create_charge", "capture_charge"]
        assert processor.calls[0]["params"]["source"] == "pm_1"
        assert processor.calls[1]["params"] == {"amount": 100}


class TestProcessorFactory:
    def test_fake_by_default(self):
        assert isinstance(processor_for(BillingConfig()), FakeProcessor)

    def test_stripe_adapter(self):
        config = BillingConfig(processor_adapter="stripe", test_secret_key="sk_test_123")
        assert isinstance(processor_for(config), StripeProcessor)

    def test_unknown_adapter(self):
        with pytest.raises(ValueError):
            processor_for(BillingConfig(processor_adapter="paypal"))


class TestStripeProcessor:
    def test_requires_secret_key_for_mode(self):
        with pytest.raises(ValueError):
            StripeProcessor(BillingConfig(testmode=False, test_secret_key="sk_test_123"))

    def test_uses_mode_secret_key(self):
        processor = StripeProcessor(BillingConfig(testmode=False, live_secret_key="sk_live_9"))
        assert processor.api_key == "sk_live_9"

    def test_create_charge_sends_params_with_api_key(self):
        processor = StripeProcessor(BillingConfig(test_secret_key="sk_test_123"))
        with patch.object(stripe.Charge, "create", return_value={"id": "ch_1", "object": "charge"}) as create:
            charge = processor.create_charge(_request())

        assert charge == {"id": "ch_1", "object": "charge"}
        kwargs = create.call_args.kwargs
        assert kwargs["api_key"] == "sk_test_123"
        assert kwargs["amount"] == 4999
        assert kwargs["currency"] == "usd"
        assert kwargs["customer"] == "cus_1"
        assert kwargs["source"] == "pm_1"
        assert kwargs["statement_descriptor"] == "SHOP"

    def test_stripe_error_becomes_request_error(self):
        processor = StripeProcessor(BillingConfig(test_secret_key="sk_test_123"))
        error = stripe.CardError("Your card was declined.", param=None, code="card_declined", http_status=402)
        with patch.object(stripe.Charge, "create", side_effect=error):
            with pytest.raises(ProcessorRequestError) as excinfo:
                processor.create_charge(_request())

        assert excinfo.value.http_status == 402
        assert excinfo.value.code == "card_declined"

    def test_request_options_in_charge_params_are_dropped(self):
        processor = StripeProcessor(BillingConfig(test_secret_key="sk_test_123"))
        request = _request(extra={"api_key": "sk_other", "stripe_version": "2020-01-01", "metadata": {"a": "1"}})
        with patch.object(stripe.Charge, "create", return_value={"id": "ch_1"}) as create:
            processor.create_charge(request)

        kwargs = create.call_args.kwargs
        assert kwargs["api_key"] == "sk_test_123"
        assert "stripe_version" not in kwargs
        assert kwargs["metadata"] == {"a": "1"}

    def test_request_options_in_capture_params_are_dropped(self):
        processor = StripeProcessor(BillingConfig(test_secret_key="sk_test_123"))
        with patch.object(stripe.Charge, "capture", return_value={"id": "ch_1"}) as capture:
            processor.capture_charge("ch_1", {"amount": 2500, "stripe_account": "acct_x"})

        assert capture.call_args.kwargs == {"api_key": "sk_test_123", "amount": 2500}

    def test_capture_charge(self):
        processor = StripeProcessor(BillingConfig(test_secret_key="sk_test_123"))
        with patch.object(stripe.Charge, "capture", return_value={"id": "ch_1", "captured": True}) as capture:
            charge = processor.capture_charge("ch_1", {"amount": 2500})

        assert charge["captured"] is True
        assert capture.call_args.args == ("ch_1",)
        assert capture.call_args.kwargs == {"api_key": "sk_test_123", "amount": 2500}

    def test_capture_network_error(self):
        processor = StripeProcessor(BillingConfig(test_secret_key="sk_test_123"))
        with patch.object(stripe.Charge, "capture", side_effect=stripe.APIConnectionError("timed out")):
            with pytest.raises(ProcessorRequestError):
                processor.capture_charge("ch_1")
