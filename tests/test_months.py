"""
Tests for the month table and rotation.
"""

import pytest

from acat_calc.errors import PreconditionError, StructureError
from acat_calc.months import (
    MONTH_NAMES,
    MONTHS,
    MONTHS_BY_NAME,
    cash_flow_from_mapping,
    get_month,
    rotate_from,
)


class TestMonthTable:
    """Test the canonical month table."""

    def test_twelve_months_in_calendar_order(self):
        assert [m.index for m in MONTHS] == list(range(12))
        assert MONTH_NAMES[0] == "jan"
        assert MONTH_NAMES[-1] == "dec"

    def test_lookup_table_is_read_only(self):
        with pytest.raises(TypeError):
            MONTHS_BY_NAME["jan"] = MONTHS[1]

    def test_get_month_ignores_case_and_whitespace(self):
        assert get_month(" June ").name == "june"

    @pytest.mark.parametrize("value", [None, "", "None", "  "])
    def test_unset_month_fails(self, value):
        with pytest.raises(PreconditionError):
            get_month(value)

    def test_unknown_month_fails(self):
        with pytest.raises(PreconditionError, match="Unknown month"):
            get_month("january")


class TestRotateFrom:
    """Test rotation of the month sequence."""

    def test_rotate_from_november(self):
        names = [m.name for m in rotate_from("nov")]
        assert names == ["nov", "dec", "jan", "feb", "mar", "apr",
                         "may", "june", "july", "aug", "sep", "oct"]

    @pytest.mark.parametrize("start", MONTH_NAMES)
    def test_every_start_is_a_calendar_permutation(self, start):
        rotation = rotate_from(start)
        assert len(rotation) == 12
        assert rotation[0].name == start
        assert sorted(m.name for m in rotation) == sorted(MONTH_NAMES)
        for previous, current in zip(rotation, rotation[1:]):
            assert current.index == (previous.index + 1) % 12

    def test_january_is_calendar_order(self):
        assert rotate_from("jan") == list(MONTHS)

    def test_accepts_month_instance(self):
        assert rotate_from(MONTHS[3])[0].name == "apr"

    def test_unset_month_fails_fast(self):
        with pytest.raises(PreconditionError):
            rotate_from("None")


class TestCashFlowFromMapping:
    """Test building fully populated cash-flow records."""

    def test_missing_months_default_to_zero(self):
        record = cash_flow_from_mapping({"mar": 5})
        assert len(record) == 12
        assert record["mar"] == 5.0
        assert record["jan"] == 0.0

    def test_blank_and_string_values(self):
        record = cash_flow_from_mapping({"jan": "", "feb": "1,200.5"})
        assert record["jan"] == 0.0
        assert record["feb"] == 1200.5

    def test_bookkeeping_keys_are_dropped(self):
        record = cash_flow_from_mapping({"_id": "abc", "last_updated": "2019-01-01", "may": 1})
        assert set(record) == set(MONTH_NAMES)

    def test_unknown_key_fails(self):
        with pytest.raises(StructureError):
            cash_flow_from_mapping({"janvier": 1})

    def test_non_numeric_value_fails(self):
        with pytest.raises(StructureError):
            cash_flow_from_mapping({"jan": "lots"})
