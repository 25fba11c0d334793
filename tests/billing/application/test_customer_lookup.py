"""Application tests for the repository-backed customer record lookup."""

import pytest
from billing.customer.customer import CustomerRecord
from billing.charging.models import OrderContext
from billing.customer.lookup import RepositoryCustomerLookup
from billing.errors import CustomerNotFoundError
from protean.exceptions import ValidationError


class TestGetCustomerRecord:
    def test_unknown_user_returns_none(self, customers):
        assert customers.get_customer_record("404") is None

    def test_saved_record_is_returned(self, customers, saved_customer):
        record = customers.get_customer_record("7")
        assert record.customer_id == "cus_1"
        assert record.default_payment_method_id == "pm_1"
        assert [m.last4 for m in record.ordered_methods()] == ["4242"]

    def test_integer_user_ids_resolve(self, customers, saved_customer):
        assert customers.get_customer_record(7) is not None

    def test_modes_are_kept_apart(self, saved_customer):
        assert RepositoryCustomerLookup(mode="live").get_customer_record("7") is None

    def test_saving_record_of_other_mode_rejected(self, customers):
        record = CustomerRecord.register(user_id="9", customer_id="cus_9", mode="live")
        with pytest.raises(ValueError):
            customers.save(record)


class TestUpdateCustomerRecord:
    def test_update_default_method(self, customers, saved_customer):
        saved_customer.add_payment_method("pm_2")
        customers.save(saved_customer)

        customers.update_customer_record("7", {"default_payment_method_id": "pm_2"})

        assert customers.get_customer_record("7").default_payment_method_id == "pm_2"

    def test_update_customer_id(self, customers, saved_customer):
        customers.update_customer_record("7", {"customer_id": "cus_new"})
        assert customers.get_customer_record("7").customer_id == "cus_new"

    def test_update_unknown_field_rejected(self, customers, saved_customer):
        with pytest.raises(ValueError):
            customers.update_customer_record("7", {"mode": "live"})

    def test_update_missing_user(self, customers):
        with pytest.raises(CustomerNotFoundError):
            customers.update_customer_record("404", {"customer_id": "cus_x"})


class TestChooseAndDelete:
    def test_choose_default_by_position(self, customers, saved_customer):
        saved_customer.add_payment_method("pm_2")
        customers.save(saved_customer)

        customers.choose_default("7", 1)

        assert customers.get_customer_record("7").default_payment_method_id == "pm_2"

    def test_choose_out_of_range(self, customers, saved_customer):
        with pytest.raises(ValidationError):
            customers.choose_default("7", 4)

    def test_delete_persists(self, customers, saved_customer):
        saved_customer.add_payment_method("pm_2")
        customers.save(saved_customer)

        customers.delete_payment_method("7", 0)

        record = customers.get_customer_record("7")
        assert [m.method_id for m in record.ordered_methods()] == ["pm_2"]
        assert record.default_payment_method_id == "pm_2"

    def test_delete_for_unknown_user(self, customers):
        with pytest.raises(CustomerNotFoundError):
            customers.delete_payment_method("404", 0)

    def test_record_survives_losing_all_methods(self, customers, saved_customer):
        customers.delete_payment_method("7", 0)
        record = customers.get_customer_record("7")
        assert record is not None
        assert record.customer_id == "cus_1"


class TestSaveTokenizedCard:
    def test_first_card_creates_record(self, customers):
        customers.save_tokenized_card("8", "cus_8", "card_1", last4="4242", expiry_month=1, expiry_year=2031)

        record = customers.get_customer_record("8")
        assert record.customer_id == "cus_8"
        assert record.mode == "test"
        assert record.default_payment_method_id == "card_1"
        assert [m.last4 for m in record.ordered_methods()] == ["4242"]

    def test_record_created_in_lookup_mode(self):
        live = RepositoryCustomerLookup(mode="live")
        live.save_tokenized_card("8", "cus_live_8", "card_1")

        assert live.get_customer_record("8").mode == "live"
        assert RepositoryCustomerLookup(mode="test").get_customer_record("8") is None

    def test_later_card_is_appended(self, customers, saved_customer):
        customers.save_tokenized_card("7", "cus_1", "pm_2", last4="5555")

        record = customers.get_customer_record("7")
        assert [m.method_id for m in record.ordered_methods()] == ["pm_1", "pm_2"]
        assert record.default_payment_method_id == "pm_1"

    def test_later_card_can_become_default(self, customers, saved_customer):
        customers.save_tokenized_card("7", "cus_1", "pm_2", make_default=True)
        assert customers.get_customer_record("7").default_payment_method_id == "pm_2"

    def test_new_customer_id_replaces_stored_one(self, customers, saved_customer):
        customers.save_tokenized_card("7", "cus_2", "pm_2")
        assert customers.get_customer_record("7").customer_id == "cus_2"

    def test_card_saved_after_all_were_deleted_becomes_default(self, customers, saved_customer):
        customers.delete_payment_method("7", 0)
        customers.save_tokenized_card("7", "cus_1", "pm_3")
        assert customers.get_customer_record("7").default_payment_method_id == "pm_3"

    def test_duplicate_card_rejected(self, customers, saved_customer):
        with pytest.raises(ValidationError):
            customers.save_tokenized_card("7", "cus_1", "pm_1")

    def test_saved_card_can_be_charged(self, customers, orchestrator, processor):
        customers.save_tokenized_card("8", "cus_8", "card_1")

        outcome = orchestrator.charge_for_order(OrderContext(order_id="2001", user_id="8", amount_due=10))

        assert outcome.succeeded is True
        request = processor.calls[0]["request"]
        assert request.customer_id == "cus_8"
        assert request.payment_method_id == "card_1"
