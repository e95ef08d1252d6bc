from __future__ import annotations

import math

import pytest

from studydiff.config import Settings
from studydiff.diff.comparator import (
    Comparison,
    ComparisonOptions,
    FieldComparator,
    UnitTokenTable,
    values_equivalent,
)
from studydiff.kernel.errors import ConfigurationError

pytestmark = pytest.mark.unit


@pytest.fixture
def comparator() -> FieldComparator:
    return FieldComparator()


@pytest.mark.parametrize(
    ("old", "new"),
    [
        ("10.0 kA", "10 kA"),
        ("10 kA", "10.00 kA"),
        ("10.0 kA", "10.00 kA"),
        ("8.5", "8.50"),
        ("12.1 cal/cm2", "12.10 cal/cm2"),
        ("12.1 CAL/CM^2", "12.1"),
        ("800 A", "800"),
        ("1,200", "1200"),
        ("1.5e3", "1500"),
        ("  42 ", "42.0"),
    ],
)
def test_numerically_equal_values_are_equal(comparator, old, new):
    assert comparator.compare(old, new) is Comparison.EQUAL


@pytest.mark.parametrize("old,new", [("", None), (None, "   "), ("", "\t"), (None, None)])
def test_blank_values_are_equal(comparator, old, new):
    assert comparator.equivalent(old, new)


def test_exact_string_match_is_equal(comparator):
    assert comparator.equivalent("Square D", "Square D")


def test_different_numbers_are_not_equal(comparator):
    assert comparator.compare("10.0 kA", "10.1 kA") is Comparison.NOT_EQUAL


def test_text_differs_by_case(comparator):
    assert not comparator.equivalent("Square D", "square d")


def test_blank_against_value_is_not_equal(comparator):
    assert not comparator.equivalent(None, "0")
    assert not comparator.equivalent("", "480")


def test_unknown_suffix_is_not_stripped(comparator):
    # "kV" is not a known unit token, so both sides stay non-numeric.
    assert not comparator.equivalent("13.8 kV", "13.80 kV")


def test_numeric_against_text_is_not_equal(comparator):
    assert not comparator.equivalent("480", "480V")


def test_unit_token_only_stripped_as_suffix(comparator):
    assert comparator.parse_number("A10") is None


def test_relative_tolerance_scales_with_magnitude(comparator):
    assert comparator.equivalent("1000000", "1000000.5")
    assert not comparator.equivalent("1000000", "1000002")


def test_tolerance_is_absolute_below_one(comparator):
    assert comparator.equivalent("0.0000001", "0.0000005")
    assert not comparator.equivalent("0.001", "0.002")


def test_custom_tolerance():
    loose = FieldComparator(ComparisonOptions(tolerance=0.01))
    assert loose.equivalent("100", "100.9")
    assert not loose.equivalent("100", "102")


def test_parse_rejects_non_finite(comparator):
    assert comparator.parse_number("NaN") is None
    assert comparator.parse_number("inf") is None
    assert comparator.parse_number("1e999") is None


def test_parse_number_strips_known_units(comparator):
    assert comparator.parse_number("10.0 kA") == 10.0
    assert comparator.parse_number("8.5 cal/cm^2") == 8.5
    assert comparator.parse_number("-3") == -3.0


def test_values_equivalent_helper():
    assert values_equivalent("10.0 kA", "10 kA")
    assert not values_equivalent("10 kV", "10.0 kV")


class TestUnitTokenTable:
    def test_longest_token_wins(self):
        table = UnitTokenTable(("A", "kA"))
        assert table.strip("10 kA") == "10"

    def test_custom_table(self):
        comparator = FieldComparator(ComparisonOptions(unit_tokens=UnitTokenTable(("kV",))))
        assert comparator.equivalent("13.8 kV", "13.80 kV")
        # "kA" is no longer known.
        assert not comparator.equivalent("10 kA", "10.0 kA")

    def test_rejects_blank_token(self):
        with pytest.raises(ConfigurationError):
            UnitTokenTable(("kA", " "))


class TestComparisonOptions:
    def test_rejects_negative_tolerance(self):
        with pytest.raises(ConfigurationError) as exc:
            ComparisonOptions(tolerance=-1)
        assert exc.value.code == "config.tolerance_invalid"

    def test_rejects_nan_tolerance(self):
        with pytest.raises(ConfigurationError):
            ComparisonOptions(tolerance=math.nan)

    def test_from_settings(self):
        settings = Settings(numeric_tolerance=0.5, unit_tokens=["kV"], ignored_fields=["Comments"])
        options = ComparisonOptions.from_settings(settings, {"Bus": ["Description"]})
        assert options.tolerance == 0.5
        assert options.unit_tokens.tokens == ("kV",)
        assert options.is_ignored("Motor", "Comments")
        assert options.is_ignored("Bus", "Description")
        assert not options.is_ignored("Motor", "Description")
