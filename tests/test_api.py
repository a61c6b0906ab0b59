import pytest
from fastapi.testclient import TestClient
from pymongo.errors import ServerSelectionTimeoutError

from ai_search import main
from ai_search.summary import NO_RESULTS_MESSAGE


@pytest.fixture
def client():
    # no context manager: startup (index creation) is not run
    return TestClient(main.app)


@pytest.fixture
def captured(monkeypatch):
    calls = []
    results = {"records": [{"id": "a1", "title": "Seafront Apartment"}], "total": 1}

    def fake_find(predicates, sort_keys, limit=50):
        calls.append({"predicates": predicates, "sort_keys": sort_keys, "limit": limit})
        return results["records"], results["total"]

    monkeypatch.setattr(main, "find_properties", fake_find)
    return {"calls": calls, "results": results}


def test_health(client):
    body = client.get("/health").json()
    assert body["status"] == "ok"


def test_ai_search_response_shape(client, captured):
    q = "3 bedroom apartment in Cyprus under $300k"
    resp = client.post("/api/ai-search", json={"query": q})

    assert resp.status_code == 200
    body = resp.json()
    assert body["query"] == q
    assert body["filters"] == {
        "country": "CYPRUS",
        "maxPrice": 300000,
        "bedrooms": 3,
        "propertyType": "apartment",
    }
    assert body["properties"] == [{"id": "a1", "title": "Seafront Apartment"}]
    assert body["count"] == 1
    assert body["summary"] == (
        "I found 1 property matching your search with the following criteria: "
        "3 bedrooms, in Cyprus, under $300,000."
    )
    assert captured["calls"][0]["limit"] == main.MAX_RESULTS


def test_count_is_returned_length_not_total(client, captured):
    captured["results"]["records"] = [{"id": str(i)} for i in range(50)]
    captured["results"]["total"] = 75

    body = client.post("/api/ai-search", json={"query": "villa"}).json()
    assert body["count"] == 50
    assert body["summary"] == (
        "I found 50 properties matching your search."
    )


def test_no_results(client, captured):
    captured["results"]["records"] = []
    captured["results"]["total"] = 0

    body = client.post("/api/ai-search", json={"query": "castle in lebanon"}).json()
    assert body["count"] == 0
    assert body["summary"] == NO_RESULTS_MESSAGE
    assert body["filters"] == {"country": "LEBANON"}


def test_context_is_accepted_and_ignored(client, captured):
    q = "highest roi in greece"
    plain = client.post("/api/ai-search", json={"query": q}).json()
    with_ctx = client.post(
        "/api/ai-search",
        json={"query": q, "context": {"userId": "u1", "previousSearches": ["villa in cyprus"]}},
    ).json()
    assert plain["filters"] == with_ctx["filters"] == {
        "country": "GREECE",
        "goal": "HIGH_ROI",
        "sortBy": "roi",
    }


@pytest.mark.parametrize("payload", [{}, {"query": ""}, {"query": 42}])
def test_invalid_query_is_400(client, captured, payload):
    resp = client.post("/api/ai-search", json=payload)
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"] == "Validation Error"
    assert body["message"] == "Invalid search query"
    assert body["details"]
    assert captured["calls"] == []


def test_storage_failure_is_500(client, monkeypatch):
    def broken(*args, **kwargs):
        raise ServerSelectionTimeoutError("no servers")

    monkeypatch.setattr(main, "find_properties", broken)
    resp = client.post("/api/ai-search", json={"query": "villa"})
    assert resp.status_code == 500
    assert resp.json() == {
        "error": "Internal Server Error",
        "message": "Failed to process AI search",
    }


def test_suggestions(client):
    body = client.get("/api/ai-search/suggestions").json()
    assert len(body) == 6
    assert body[2] == {
        "text": "Golden Visa eligible properties",
        "category": "Residency",
        "icon": "shield",
    }


def test_unexpected_failure_keeps_json_body(monkeypatch):
    def overflow(*args, **kwargs):
        raise OverflowError("MongoDB can only handle up to 8-byte ints")

    monkeypatch.setattr(main, "find_properties", overflow)
    client = TestClient(main.app, raise_server_exceptions=False)
    resp = client.post("/api/ai-search", json={"query": "villa"})
    assert resp.status_code == 500
    assert resp.json() == {
        "error": "Internal Server Error",
        "message": "Failed to process AI search",
    }


def test_huge_number_in_query_is_not_an_error(client, captured):
    resp = client.post("/api/ai-search", json={"query": "9" * 5000 + " bed"})
    assert resp.status_code == 200
    assert resp.json()["filters"] == {}
    assert captured["calls"][0]["predicates"] == []
