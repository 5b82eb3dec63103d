"""
Tests for the measurements export document
"""
import json
from datetime import datetime, timezone

import pytest

from bodyscan.services.export import build_export, export_filename, iso_timestamp
from bodyscan.services.recommendation import recommend
from bodyscan.utils.units import convert
from tests.conftest import make_record

EXPORTED_AT = datetime(2026, 10, 19, 8, 30, 15, 250000, tzinfo=timezone.utc)


@pytest.fixture
def document(record, full_snapshots):
    return build_export(record, recommend(record), full_snapshots, exported_at=EXPORTED_AT)


class TestBuildExport:

    def test_top_level_keys(self, document):
        assert set(document) == {"measurements", "recommendations", "rawPoseData", "timestamp", "confidence"}

    def test_measurement_field_names(self, document):
        measurements = document["measurements"]
        for key in ("neckCircumference", "shoulderWidth", "chestCircumference", "bustCircumference",
                    "underbustCircumference", "waistCircumference", "armLength", "bicepCircumference",
                    "wristCircumference", "shirtLength", "hipCircumference", "thighCircumference", "inseam",
                    "outseam", "kneeCircumference", "calfCircumference", "ankleCircumference", "height",
                    "confidence", "capturedAt", "units"):
            assert key in measurements
        assert "weight" not in measurements
        assert measurements["units"] == "inches"

    def test_confidence_mirrors_measurements(self, document):
        assert document["confidence"] == document["measurements"]["confidence"] == 0.75

    def test_raw_pose_data(self, document):
        raw = document["rawPoseData"]
        assert [s["stepId"] for s in raw] == ["front", "side-right", "back", "side-left", "front-arms"]
        assert all("timestamp" in s and "landmarks" in s and "imageData" in s for s in raw)
        assert len(raw[0]["landmarks"]) == 33

    def test_recommendations(self, document):
        assert [r["category"] for r in document["recommendations"]] == ["Shirt", "Pants", "Jacket"]
        assert set(document["recommendations"][0]) == {"category", "size", "fit", "confidence"}

    def test_timestamp_is_iso(self, document):
        assert document["timestamp"] == "2026-10-19T08:30:15.250Z"

    def test_json_serializable(self, document):
        assert json.loads(json.dumps(document)) == document

    def test_cm_export(self, record, full_snapshots):
        document = build_export(convert(record, "cm"), recommend(record), full_snapshots)
        assert document["measurements"]["units"] == "cm"
        assert document["measurements"]["height"] == pytest.approx(70.0 * 2.54)


class TestFilename:

    def test_dated_filename(self):
        assert export_filename(EXPORTED_AT) == "body-measurements-2026-10-19.json"

    def test_iso_timestamp_defaults_to_now(self):
        assert iso_timestamp().endswith("Z")


def test_optional_weight_exported_when_present(full_snapshots):
    record = make_record(weight=160.0)
    document = build_export(record, recommend(record), full_snapshots)
    assert document["measurements"]["weight"] == 160.0
