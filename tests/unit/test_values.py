"""Tests for Decimal coercion and quantity/price validation."""

from datetime import UTC, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from costing_kernel.domain.values import (
    aware_timestamp,
    commodity_id,
    non_negative_quantity,
    nonzero_delta,
    positive_quantity,
    to_decimal,
    unit_price,
)
from costing_kernel.exceptions import (
    InvalidCommodityIdError,
    InvalidPriceError,
    InvalidQuantityError,
    InvalidTimestampError,
)


class TestToDecimal:

    def test_decimal_passthrough(self):
        value = Decimal("26.5")
        assert to_decimal(value) is value

    def test_int_and_str(self):
        assert to_decimal(1500) == Decimal("1500")
        assert to_decimal(" 28.75 ") == Decimal("28.75")

    def test_float_goes_through_str(self):
        """0.1 must not carry its binary expansion into the ledger."""
        assert to_decimal(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("bad", ["abc", "", None, True, "NaN", "Infinity", Decimal("NaN")])
    def test_rejects_non_numeric_and_non_finite(self, bad):
        with pytest.raises(ValueError):
            to_decimal(bad)


class TestQuantityValidation:

    def test_positive_quantity_accepts_positive(self):
        assert positive_quantity("500") == Decimal("500")

    @pytest.mark.parametrize("bad", [0, "-1", Decimal("-0.001")])
    def test_positive_quantity_rejects_non_positive(self, bad):
        with pytest.raises(InvalidQuantityError) as exc_info:
            positive_quantity(bad)
        assert exc_info.value.code == "INVALID_QUANTITY"

    def test_positive_quantity_rejects_garbage(self):
        with pytest.raises(InvalidQuantityError, match="not a finite number"):
            positive_quantity("lots")

    def test_non_negative_quantity_allows_zero(self):
        assert non_negative_quantity(0) == Decimal("0")

    def test_non_negative_quantity_rejects_negative(self):
        with pytest.raises(InvalidQuantityError):
            non_negative_quantity(-5)

    def test_nonzero_delta(self):
        assert nonzero_delta("-40") == Decimal("-40")
        with pytest.raises(InvalidQuantityError, match="must not be zero"):
            nonzero_delta(0)


class TestPriceValidation:

    def test_zero_price_allowed(self):
        assert unit_price(0) == Decimal("0")

    def test_negative_price_rejected(self):
        with pytest.raises(InvalidPriceError) as exc_info:
            unit_price("-0.01")
        assert exc_info.value.code == "INVALID_PRICE"
        assert exc_info.value.price == "-0.01"

    def test_non_numeric_price_rejected(self):
        with pytest.raises(InvalidPriceError):
            unit_price("free")


class TestNegativeZero:

    def test_negative_zero_is_unsigned(self):
        assert not to_decimal(Decimal("-0")).is_signed()
        assert str(to_decimal("-0.00")) == "0.00"

    def test_zero_price_serializes_without_sign(self):
        assert str(unit_price(Decimal("-0"))) == "0"

    def test_zero_starting_stock_without_sign(self):
        assert str(non_negative_quantity("-0")) == "0"


class TestCommodityId:

    def test_accepts_name(self):
        assert commodity_id("Gasohol95") == "Gasohol95"

    @pytest.mark.parametrize("bad", ["", "   ", None, 95])
    def test_rejects_blank_or_non_string(self, bad):
        with pytest.raises(InvalidCommodityIdError) as exc_info:
            commodity_id(bad)
        assert exc_info.value.code == "INVALID_COMMODITY_ID"


class TestAwareTimestamp:

    def test_accepts_aware(self):
        when = datetime(2026, 1, 1, 7, 0, tzinfo=timezone(timedelta(hours=7)))
        assert aware_timestamp(when) is when

    def test_rejects_naive(self):
        with pytest.raises(InvalidTimestampError) as exc_info:
            aware_timestamp(datetime(2026, 1, 1))
        assert exc_info.value.code == "INVALID_TIMESTAMP"
        assert exc_info.value.timestamp == "2026-01-01T00:00:00"

    def test_utc_accepted(self):
        assert aware_timestamp(datetime(2026, 1, 1, tzinfo=UTC)).tzinfo is UTC
