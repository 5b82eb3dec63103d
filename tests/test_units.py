"""
Tests for inches / centimeters conversion of measurement records
"""
import pytest

from bodyscan.utils.units import CM_PER_INCH, LENGTH_FIELDS, OPTIONAL_LENGTH_FIELDS, convert
from tests.conftest import make_record


class TestConvert:

    def test_same_unit_returns_record(self, record):
        assert convert(record, "inches") is record

    def test_inches_to_cm(self, record):
        cm = convert(record, "cm")
        assert cm.units == "cm"
        assert cm.height == pytest.approx(70.0 * CM_PER_INCH)
        assert cm.chest_circumference == pytest.approx(38.0 * CM_PER_INCH)
        assert cm.bust_circumference == pytest.approx(36.1 * CM_PER_INCH)

    def test_metadata_untouched(self, record):
        cm = convert(record, "cm")
        assert cm.confidence == record.confidence
        assert cm.captured_at == record.captured_at

    def test_does_not_mutate_input(self, record):
        convert(record, "cm")
        assert record.units == "inches"
        assert record.height == 70.0

    def test_round_trip(self, record):
        back = convert(convert(record, "cm"), "inches")
        for field in LENGTH_FIELDS + OPTIONAL_LENGTH_FIELDS:
            original = getattr(record, field)
            if original is None:
                assert getattr(back, field) is None
            else:
                assert getattr(back, field) == pytest.approx(original, rel=1e-9)
        assert back.units == "inches"

    def test_absent_optionals_stay_absent(self):
        record = make_record(bust_circumference=None, underbust_circumference=None)
        cm = convert(record, "cm")
        assert cm.bust_circumference is None
        assert cm.underbust_circumference is None
        assert cm.weight is None

    def test_weight_converted_when_present(self):
        cm = convert(make_record(weight=150.0), "cm")
        assert cm.weight == pytest.approx(150.0 * CM_PER_INCH)

    def test_unknown_unit(self, record):
        with pytest.raises(ValueError):
            convert(record, "feet")
