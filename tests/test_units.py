"""Tests for unit systems and efficiency formulas."""

import pytest

from fuellog.calculations.constants import IMPERIAL_GAL_PER_LITER, MILES_PER_KM
from fuellog.calculations.units import Units
from fuellog.exceptions import ConfigurationError


class TestEfficiency:

    @pytest.mark.parametrize("units,expected", [
        (Units.MPG_US, 25.0),
        (Units.KM_PER_L, 25.0),
        (Units.KM_PER_GAL, 25.0),
        (Units.L_PER_100KM, 4.0),
    ])
    def test_simple_ratios(self, units, expected):
        assert units.efficiency(300, 12) == pytest.approx(expected)

    def test_uk_miles_and_liters(self):
        expected = 300 / (12 * IMPERIAL_GAL_PER_LITER)
        assert Units.MPG_UK_MI_L.efficiency(300, 12) == pytest.approx(expected)

    def test_uk_kilometers_and_liters(self):
        expected = (300 * MILES_PER_KM) / (12 * IMPERIAL_GAL_PER_LITER)
        assert Units.MPG_UK_KM_L.efficiency(300, 12) == pytest.approx(expected)

    @pytest.mark.parametrize("units", list(Units))
    @pytest.mark.parametrize("distance,volume", [(0, 12), (300, 0), (0, 0), (None, 5)])
    def test_zero_inputs_give_zero(self, units, distance, volume):
        assert units.efficiency(distance, volume) == 0.0


class TestLabels:

    def test_mpg_us_labels(self):
        units = Units.MPG_US
        assert units.distance_label == "Miles"
        assert units.distance_label_lower == "miles"
        assert units.volume_label_lower == "gallons"
        assert units.efficiency_label == "mpg"
        assert units.distance_ratio_label == "per mile"
        assert units.volume_ratio_label == "per gallon"

    def test_metric_labels(self):
        units = Units.L_PER_100KM
        assert units.distance_label_lower == "kilometers"
        assert units.volume_label == "Liters"
        assert units.efficiency_label == "L/100km"
        assert units.distance_ratio_label == "per kilometer"
        assert units.volume_ratio_label == "per liter"

    @pytest.mark.parametrize("units,capacity", [
        (Units.MPG_US, 16.0),
        (Units.KM_PER_GAL, 16.0),
        (Units.KM_PER_L, 60.0),
        (Units.MPG_UK_MI_L, 60.0),
    ])
    def test_default_tank_capacity(self, units, capacity):
        assert units.default_tank_capacity == capacity


class TestFromPreference:

    def test_preference_order(self):
        assert [u.preference_value for u in Units] == [0, 1, 2, 3, 4, 5]

    @pytest.mark.parametrize("value,expected", [
        (Units.KM_PER_L, Units.KM_PER_L),
        ("L_PER_100KM", Units.L_PER_100KM),
        ("mpg_uk_mi_l", Units.MPG_UK_MI_L),
        (4, Units.MPG_UK_KM_L),
        ("5", Units.KM_PER_GAL),
    ])
    def test_accepted_values(self, value, expected):
        assert Units.from_preference(value) is expected

    @pytest.mark.parametrize("value", ["furlongs", 6, "-1"])
    def test_rejected_values(self, value):
        with pytest.raises(ConfigurationError) as exc_info:
            Units.from_preference(value)
        assert exc_info.value.config_key == "units"
