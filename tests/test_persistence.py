"""
Tests for the Supabase measurement store client
"""
from unittest.mock import MagicMock

import pytest
import requests

from bodyscan.exceptions import PersistenceError
from bodyscan.services.persistence import SupabaseMeasurementStore


def make_response(rows, status_error=None):
    response = MagicMock()
    response.json.return_value = rows
    if status_error:
        response.raise_for_status.side_effect = status_error
    return response


@pytest.fixture
def store():
    store = SupabaseMeasurementStore("https://example.supabase.co/", "service-key", timeout=5)
    store.session = MagicMock()
    return store


class TestConfiguration:

    def test_headers_carry_service_key(self):
        store = SupabaseMeasurementStore("https://example.supabase.co", "service-key")
        assert store.session.headers["apikey"] == "service-key"
        assert store.session.headers["Authorization"] == "Bearer service-key"

    def test_unconfigured_store_raises(self, record, full_snapshots):
        store = SupabaseMeasurementStore(None, None)
        assert not store.is_configured
        with pytest.raises(PersistenceError, match="not configured"):
            store.save(record, full_snapshots)


class TestProfiles:

    def test_existing_profile_is_reused(self, store):
        assert store.create_or_reuse_profile("profile-1") == "profile-1"
        store.session.post.assert_not_called()

    def test_new_profile_defaults(self, store):
        store.session.post.return_value = make_response([{"id": "profile-2"}])

        assert store.create_or_reuse_profile() == "profile-2"

        url = store.session.post.call_args.args[0]
        row = store.session.post.call_args.kwargs["json"]
        assert url == "https://example.supabase.co/rest/v1/profiles"
        assert row == {"name": "Anonymous User", "preferences": {"units": "inches", "fit": "regular"}}
        assert store.session.post.call_args.kwargs["timeout"] == 5


class TestSave:

    def test_save_inserts_profile_then_measurement(self, store, record, full_snapshots):
        store.session.post.side_effect = [
            make_response([{"id": "profile-3"}]),
            make_response([{"id": "measurement-9"}]),
        ]

        result = store.save(record, full_snapshots)

        assert result == {"measurementId": "measurement-9", "profileId": "profile-3"}
        url = store.session.post.call_args.args[0]
        row = store.session.post.call_args.kwargs["json"]
        assert url.endswith("/rest/v1/measurements")
        assert row["profile_id"] == "profile-3"
        assert row["confidence"] == 0.75
        assert row["measurements"]["chestCircumference"] == 38.0
        assert [s["stepId"] for s in row["raw_landmarks"]] == [s.step_id for s in full_snapshots]

    def test_transport_failure(self, store, record, full_snapshots):
        store.session.post.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(PersistenceError):
            store.save(record, full_snapshots, profile_id="profile-1")

    def test_rejected_write(self, store, record, full_snapshots):
        store.session.post.return_value = make_response(
            {"message": "denied"}, status_error=requests.HTTPError("401 Client Error")
        )
        with pytest.raises(PersistenceError):
            store.save(record, full_snapshots, profile_id="profile-1")

    def test_empty_response(self, store, record, full_snapshots):
        store.session.post.return_value = make_response([])
        with pytest.raises(PersistenceError):
            store.insert_measurement("profile-1", record, full_snapshots)

    def test_record_survives_failure(self, store, record, full_snapshots):
        store.session.post.side_effect = requests.Timeout("timed out")
        with pytest.raises(PersistenceError):
            store.save(record, full_snapshots)
        assert record.chest_circumference == 38.0
