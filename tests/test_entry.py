"""Tests for the data entry calculator."""

import pytest

from fuellog.calculations.constants import MAX_COST, MAX_VOLUME
from fuellog.calculations.entry import (
    DataEntryMode,
    EntryValues,
    complete_entry,
    derive_cost,
    derive_price,
    derive_volume,
    validate_cost,
)
from fuellog.exceptions import ConfigurationError, OutOfRangeError, ValidationError


class TestDerive:

    def test_cost(self):
        assert derive_cost(3.459, 12.0) == pytest.approx(41.508)

    def test_volume(self):
        assert derive_volume(41.508, 3.459) == pytest.approx(12.0)

    def test_volume_with_zero_price(self):
        assert derive_volume(20.0, 0) == 0.0

    def test_price(self):
        assert derive_price(41.508, 12.0) == pytest.approx(3.459)

    def test_price_with_zero_volume(self):
        assert derive_price(20.0, 0) == 0.0

    def test_negative_input(self):
        with pytest.raises(OutOfRangeError) as exc_info:
            derive_cost(-1, 10)
        assert exc_info.value.field == "price"

    def test_derived_value_over_cap(self):
        with pytest.raises(OutOfRangeError) as exc_info:
            derive_cost(999, MAX_VOLUME)
        assert exc_info.value.field == "cost"
        assert exc_info.value.expected_range == (0, MAX_COST)

    def test_derived_volume_over_cap(self):
        with pytest.raises(OutOfRangeError) as exc_info:
            derive_volume(MAX_COST, 0.001)
        assert exc_info.value.field == "volume"

    @pytest.mark.parametrize("derive,args,field", [
        (derive_cost, (float("nan"), 10.0), "price"),
        (derive_cost, (3.5, float("nan")), "volume"),
        (derive_volume, (float("nan"), 3.5), "cost"),
        (derive_price, (35.0, float("nan")), "volume"),
    ])
    def test_nan_input(self, derive, args, field):
        with pytest.raises(OutOfRangeError) as exc_info:
            derive(*args)
        assert exc_info.value.field == field


class TestCompleteEntry:

    def test_calculate_price(self):
        values = complete_entry(DataEntryMode.CALCULATE_PRICE, volume=10.0, cost=35.0)
        assert values == EntryValues(price=3.5, volume=10.0, cost=35.0)

    def test_calculate_volume(self):
        values = complete_entry("CALCULATE_VOLUME", price=3.5, cost=35.0)
        assert values.volume == pytest.approx(10.0)

    def test_calculate_cost(self):
        values = complete_entry(2, price=3.5, volume=10.0)
        assert values.cost == pytest.approx(35.0)

    def test_derived_value_replaces_supplied_one(self):
        values = complete_entry(DataEntryMode.CALCULATE_COST, price=3.0, volume=10.0, cost=1.0)
        assert values.cost == pytest.approx(30.0)

    @pytest.mark.parametrize("mode,kwargs,missing", [
        (DataEntryMode.CALCULATE_PRICE, {"cost": 10.0}, "volume"),
        (DataEntryMode.CALCULATE_VOLUME, {"price": 3.0}, "cost"),
        (DataEntryMode.CALCULATE_COST, {"volume": 3.0}, "price"),
    ])
    def test_missing_input(self, mode, kwargs, missing):
        with pytest.raises(ValidationError) as exc_info:
            complete_entry(mode, **kwargs)
        assert exc_info.value.field == missing

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError):
            complete_entry("GUESS", price=1.0, volume=1.0)


class TestValidateCost:

    def test_zero_cost_rejected_when_required(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_cost(0, cost_required=True)
        assert exc_info.value.field == "cost"

    def test_zero_cost_allowed_when_optional(self):
        assert validate_cost(0, cost_required=False) == 0

    def test_negative_cost(self):
        with pytest.raises(OutOfRangeError):
            validate_cost(-0.01, cost_required=False)


def test_mode_preference_order():
    assert [DataEntryMode.from_preference(i) for i in range(3)] == [
        DataEntryMode.CALCULATE_PRICE,
        DataEntryMode.CALCULATE_VOLUME,
        DataEntryMode.CALCULATE_COST,
    ]
