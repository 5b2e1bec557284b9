"""
Tests for services/supabase_client.py with the HTTP session mocked.
"""

from unittest.mock import MagicMock

import pytest
import requests

from services.supabase_client import (
    SupabaseTMStore,
    entry_to_row,
    normalize_tm_row,
    normalize_tm_rows,
)
from services.tm_store import TMStoreError
from services.tm_matcher import TMatcher
from tests.conftest import make_entry


ROW = {
    "id": "tm-1",
    "project_id": "p1",
    "segment_id": "seg-1",
    "tm_source_text": "Take once daily",
    "tm_target_text": "Toma una vez al día",
    "source_language": "en",
    "target_language": "es",
    "match_type": "exact",
    "match_score": 100,
    "quality_score": 85,
    "confidence_level": 90,
    "therapeutic_area": "oncology",
    "tm_metadata": {"segmentType": "dosage"},
    "usage_count": 3,
    "created_at": "2024-01-01T00:00:00+00:00",
    "last_used": None,
}


def _response(payload=None, status=200, content=True):
    response = MagicMock()
    response.status_code = status
    response.content = b"[...]" if content else b""
    response.json.return_value = payload
    response.text = "error body"
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status}")
    return response


@pytest.fixture
def client():
    client = SupabaseTMStore("https://xyz.supabase.co/", "secret-key")
    client.session.request = MagicMock()
    return client


# ---------------------------------------------------------------------------
# Row normalization
# ---------------------------------------------------------------------------

class TestNormalization:
    def test_row_to_entry(self):
        entry = normalize_tm_row(ROW)
        assert entry.id == "tm-1"
        assert entry.source_text == "Take once daily"
        assert entry.target_text == "Toma una vez al día"
        assert entry.segment_type == "dosage"
        assert entry.usage_count == 3

    def test_single_object(self):
        assert len(normalize_tm_rows(ROW)) == 1

    def test_skips_invalid_rows(self):
        bad = dict(ROW, source_language=None)
        entries = normalize_tm_rows([ROW, bad, "not a row"])
        assert [e.id for e in entries] == ["tm-1"]

    def test_unexpected_payload(self):
        assert normalize_tm_rows("oops") == []

    def test_entry_to_row(self):
        row = entry_to_row(normalize_tm_row(ROW))
        assert row["tm_source_text"] == "Take once daily"
        assert row["tm_metadata"] == {"segmentType": "dosage"}
        assert row["id"] == "tm-1"

    def test_new_entry_has_no_id(self):
        assert "id" not in entry_to_row(make_entry("a", "b"))


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class TestClientSetup:
    def test_requires_url(self):
        with pytest.raises(ValueError):
            SupabaseTMStore("", "key")

    def test_headers(self, client):
        assert client.base_url == "https://xyz.supabase.co"
        assert client.session.headers["apikey"] == "secret-key"
        assert client.session.headers["Authorization"] == "Bearer secret-key"

    def test_from_settings(self):
        client = SupabaseTMStore.from_settings(
            {"url": "https://abc.supabase.co", "api_key": "k", "timeout": 5, "verify_ssl": False}
        )
        assert client.timeout == 5
        assert client.verify_ssl is False


class TestFetchCandidates:
    def test_query_parameters(self, client):
        client.session.request.return_value = _response([ROW])
        entries = client.fetch_candidates("en", "es", therapeutic_area="oncology")

        assert [e.id for e in entries] == ["tm-1"]
        args, kwargs = client.session.request.call_args
        assert args == ("GET", "https://xyz.supabase.co/rest/v1/glocal_tm_intelligence")
        assert kwargs["params"] == {
            "select": "*",
            "source_language": "eq.en",
            "target_language": "eq.es",
            "match_score": "gte.70",
            "order": "match_score.desc",
            "limit": 10,
            "therapeutic_area": "eq.oncology",
        }
        assert kwargs["timeout"] == 30

    def test_no_area_filter(self, client):
        client.session.request.return_value = _response([])
        assert client.fetch_candidates("en", "es") == []
        assert "therapeutic_area" not in client.session.request.call_args.kwargs["params"]

    def test_http_error(self, client):
        client.session.request.return_value = _response(status=500)
        with pytest.raises(TMStoreError, match="HTTP 500"):
            client.fetch_candidates("en", "es")

    def test_timeout(self, client):
        client.session.request.side_effect = requests.exceptions.Timeout()
        with pytest.raises(TMStoreError, match="timeout"):
            client.fetch_candidates("en", "es")

    def test_connection_error(self, client):
        client.session.request.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(TMStoreError, match="Connection error"):
            client.fetch_candidates("en", "es")

    def test_invalid_json(self, client):
        response = _response()
        response.json.side_effect = ValueError("bad json")
        client.session.request.return_value = response
        with pytest.raises(TMStoreError, match="Invalid JSON"):
            client.fetch_candidates("en", "es")

    def test_matcher_degrades_on_outage(self, client):
        client.session.request.side_effect = requests.exceptions.ConnectionError("refused")
        matcher = TMatcher(client, "en", "es")
        assert matcher.find_matches("Take once daily") == []
        assert "Connection error" in matcher.error


class TestWrites:
    def test_insert(self, client):
        client.session.request.return_value = _response([ROW])
        stored = client.insert_entry(make_entry("Take once daily", "Toma una vez al día"))

        assert stored.id == "tm-1"
        args, kwargs = client.session.request.call_args
        assert args[0] == "POST"
        assert kwargs["headers"] == {"Prefer": "return=representation"}
        assert kwargs["json"]["tm_source_text"] == "Take once daily"

    def test_insert_without_representation(self, client):
        client.session.request.return_value = _response(content=False)
        with pytest.raises(TMStoreError):
            client.insert_entry(make_entry("a", "b"))

    def test_increment_usage(self, client):
        client.session.request.side_effect = [
            _response([{"usage_count": 3}]),
            _response(content=False),
        ]
        client.increment_usage("tm-1")

        patch_call = client.session.request.call_args_list[1]
        assert patch_call.args[0] == "PATCH"
        assert patch_call.kwargs["params"] == {"id": "eq.tm-1"}
        assert patch_call.kwargs["json"]["usage_count"] == 4
        assert patch_call.kwargs["json"]["last_used"]

    def test_increment_unknown_entry(self, client):
        client.session.request.return_value = _response([])
        with pytest.raises(TMStoreError, match="not found"):
            client.increment_usage("missing")


class TestProjectEntries:
    def test_project_filter(self, client):
        client.session.request.return_value = _response([ROW])
        assert len(client.list_project_entries("p1")) == 1
        assert client.session.request.call_args.kwargs["params"]["project_id"] == "eq.p1"

    def test_no_project(self, client):
        client.session.request.return_value = _response([])
        client.list_project_entries(None)
        assert client.session.request.call_args.kwargs["params"]["project_id"] == "is.null"


class TestConnection:
    def test_reachable(self, client):
        client.session.request.return_value = _response([])
        assert client.test_connection() is True

    def test_unreachable(self, client):
        client.session.request.side_effect = requests.exceptions.ConnectionError()
        assert client.test_connection() is False
