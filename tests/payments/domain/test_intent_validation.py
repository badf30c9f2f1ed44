"""Tests for intent request validation and minor-unit conversion."""

from decimal import Decimal

import pytest
from payments.gateway.port import (
    VerifiedPayment,
    from_minor_units,
    to_minor_units,
    validate_intent_request,
)
from protean.exceptions import ValidationError


class TestMinorUnits:
    def test_to_minor_units(self):
        assert to_minor_units(Decimal("1020.00")) == 102000

    def test_to_minor_units_from_float(self):
        assert to_minor_units(1275.51) == 127551

    def test_half_paisa_rounds_up(self):
        assert to_minor_units(Decimal("10.005")) == 1001

    def test_from_minor_units(self):
        assert from_minor_units(17000) == Decimal("170.00")


class TestValidateIntentRequest:
    def test_valid_request_returns_minor_units(self):
        assert validate_intent_request(Decimal("170.00"), "INR") == 17000

    def test_minimum_amount_accepted(self):
        assert validate_intent_request(Decimal("1.00"), "INR") == 100

    def test_below_minimum_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_intent_request(Decimal("0.99"), "INR")
        assert "amount" in exc.value.messages

    def test_zero_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_intent_request(0, "INR")
        assert exc.value.messages["amount"] == ["Amount must be positive"]

    def test_negative_rejected(self):
        with pytest.raises(ValidationError):
            validate_intent_request(Decimal("-5.00"), "INR")

    def test_unsupported_currency_rejected(self):
        with pytest.raises(ValidationError) as exc:
            validate_intent_request(Decimal("100.00"), "USD")
        assert "currency" in exc.value.messages


class TestVerifiedPayment:
    def _payment(self, status):
        return VerifiedPayment(
            gateway_order_id="order_1",
            gateway_payment_id="pay_1",
            amount_minor_units=102000,
            currency="INR",
            status=status,
        )

    def test_amount_in_major_units(self):
        assert self._payment("captured").amount == Decimal("1020.00")

    @pytest.mark.parametrize("status", ["captured", "authorized"])
    def test_settled_statuses(self, status):
        assert self._payment(status).is_settled is True

    @pytest.mark.parametrize("status", ["created", "failed", "refunded"])
    def test_unsettled_statuses(self, status):
        assert self._payment(status).is_settled is False
