#!/usr/bin/env python
"""Tests for the HTTP surface: status codes and wire field names.

Run with: pytest tests/test_api.py -v
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from api.server import app
from src.errors import ProviderError, ValidationError
from src.models import AggregatedOutcome, SearchResult

from conftest import FakeBackend


@pytest.fixture
def client():
    original = app.state.filter_backend
    yield TestClient(app)
    app.state.filter_backend = original


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert "timestamp" in response.json()


def test_search_maps_wire_fields(client):
    outcome = AggregatedOutcome(
        results=[SearchResult(title="Chicken Soup", link="https://a", snippet="s")],
        total=1,
        query="Multiple time ranges",
    )
    with patch("api.server.search", new=AsyncMock(return_value=outcome)) as mock_search:
        response = client.post("/api/search", json={
            "keyword": "chicken soup",
            "customDork": "site:example.com",
            "timeRanges": [{"id": 1, "after": "2024-01-01", "before": "2024-02-01"}, {}],
            "maxResults": 20,
            "apiKey": "key",
            "searchEngineId": "cx",
        })

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["total"] == 1
    assert body["query"] == "Multiple time ranges"
    assert body["results"][0] == {"title": "Chicken Soup", "link": "https://a", "snippet": "s"}

    request = mock_search.await_args.args[0]
    assert request.extra_query_clause == "site:example.com"
    assert len(request.windows) == 2
    assert request.windows[0].after == "2024-01-01"
    assert request.max_results_per_window == 20
    assert request.credentials.search_engine_id == "cx"


def test_search_missing_fields_is_400(client):
    response = client.post("/api/search", json={"keyword": "soup"})
    assert response.status_code == 400
    assert "apiKey" in response.json()["error"]


def test_search_validation_error_is_400(client):
    with patch("api.server.search", new=AsyncMock(side_effect=ValidationError("Missing required field: keyword"))):
        response = client.post("/api/search", json={"apiKey": "k", "searchEngineId": "cx"})
    assert response.status_code == 400


def test_search_provider_error_is_500(client):
    with patch("api.server.search", new=AsyncMock(side_effect=ProviderError("Google CSE API error: quota"))):
        response = client.post("/api/search", json={"keyword": "soup", "apiKey": "k", "searchEngineId": "cx"})
    assert response.status_code == 500
    assert response.json() == {"error": "Search failed", "message": "Google CSE API error: quota"}


def test_filter_pass_through(client):
    app.state.filter_backend = None
    response = client.post("/api/filter", json={"titles": ["A", "B"]})
    assert response.status_code == 200
    assert response.json() == {"success": True, "filtered": ["A", "B"], "originalCount": 2, "filteredCount": 2}


def test_filter_with_backend(client):
    app.state.filter_backend = FakeBackend('Sure! Here you go: ["Soup","Stew"]')
    response = client.post("/api/filter", json={
        "titles": ["Soup", "Stew", "Ham"], "useDeduplication": True, "filterHaram": True,
    })
    assert response.status_code == 200
    assert response.json()["filtered"] == ["Soup", "Stew"]
    assert response.json()["filteredCount"] == 2


def test_filter_never_returns_titles_outside_the_input(client):
    app.state.filter_backend = FakeBackend('["Chicken Soup", "Totally Invented Recipe"]')
    response = client.post("/api/filter", json={
        "titles": ["Chicken Soup", "Beef Stew"], "useDeduplication": True,
    })
    assert response.status_code == 200
    assert response.json() == {"success": True, "filtered": ["Chicken Soup"],
                               "originalCount": 2, "filteredCount": 1}


def test_filter_rejects_non_list_titles(client):
    response = client.post("/api/filter", json={"titles": "Soup", "useDeduplication": True})
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid titles array"


def test_filter_without_backend_is_config_error(client):
    app.state.filter_backend = None
    response = client.post("/api/filter", json={"titles": ["A"], "filterHaram": True})
    assert response.status_code == 500
    assert "GEMINI_API_KEY" in response.json()["error"]


def test_settings_round_trip_rebuilds_backend(client):
    with patch("api.server.config.save_settings", return_value={"GEMINI_API_KEY": "new"}), \
         patch("api.server.build_filter_backend", return_value=FakeBackend()) as mock_build:
        response = client.post("/api/settings", json={"GEMINI_API_KEY": "new"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    mock_build.assert_called_once_with("new")
    assert isinstance(app.state.filter_backend, FakeBackend)


def test_settings_get_is_masked(client):
    with patch("api.server.config.load_settings", return_value={"GEMINI_API_KEY": "***masked***"}):
        response = client.get("/api/settings")
    assert response.json() == {"success": True, "settings": {"GEMINI_API_KEY": "***masked***"}}


def test_export_csv(client):
    response = client.post("/api/export/csv", json={"results": [{"title": "Soup"}, {"title": "Stew"}]})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "search_titles.csv" in response.headers["content-disposition"]
    assert response.text == 'title\n"Soup"\n"Stew"\n'


def test_export_csv_empty_is_400(client):
    response = client.post("/api/export/csv", json={"results": []})
    assert response.status_code == 400


def test_settings_clearing_gemini_key_disables_backend(client):
    app.state.filter_backend = FakeBackend()
    with patch("api.server.config.save_settings", return_value={"GEMINI_API_KEY": ""}):
        response = client.post("/api/settings", json={"GEMINI_API_KEY": ""})

    assert response.status_code == 200
    assert app.state.filter_backend is None

    response = client.post("/api/filter", json={"titles": ["A"], "useDeduplication": True})
    assert response.status_code == 500
    assert "GEMINI_API_KEY" in response.json()["error"]
