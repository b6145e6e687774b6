import pytest
from fastapi.testclient import TestClient

from inventory_search.api import create_app
from inventory_search.config import get_config, set_config_for_test
from inventory_search.data.backends.memory_backend import MemoryInventoryStore


class BrokenStore(MemoryInventoryStore):
    def search(self, query):
        raise RuntimeError("disk on fire")

    def get_peak_availability(self, part_number):
        raise RuntimeError("disk on fire")


@pytest.fixture
def client(store):
    return TestClient(create_app(store=store))


def test_search_returns_camel_case_envelope(client):
    response = client.get("/inventory/search", params={"criteria": "PN-1001"})

    assert response.status_code == 200
    assert "X-Process-Time" in response.headers
    body = response.json()
    assert body["isFailed"] is False
    assert body["message"] is None
    assert body["data"]["total"] == 3
    item = body["data"]["items"][0]
    assert item["partNumber"] == "PN-1001"
    assert {"supplierSku", "availableQty", "leadTimeDays", "lastPurchaseDate", "lots"} <= set(item)


def test_search_defaults(client):
    body = client.get("/inventory/search").json()
    assert body["data"]["total"] == 60
    assert len(body["data"]["items"]) == 20
    part_numbers = [item["partNumber"] for item in body["data"]["items"]]
    assert part_numbers == sorted(part_numbers)


def test_search_default_size_follows_config(store):
    set_config_for_test(default_page_size=7)
    client = TestClient(create_app(store=store))
    body = client.get("/inventory/search").json()
    assert len(body["data"]["items"]) == 7


def test_search_filters_sort_and_paging(client):
    response = client.get(
        "/inventory/search",
        params={
            "criteria": "pn",
            "branches": "sea, den",
            "onlyAvailable": "true",
            "sort": "availableQty:desc",
            "page": 0,
            "size": 50,
        },
    )
    body = response.json()
    items = body["data"]["items"]
    assert response.status_code == 200
    assert body["data"]["total"] == len(items)
    assert all(item["branch"].strip().upper() in {"SEA", "DEN"} for item in items)
    assert all(item["availableQty"] > 0 for item in items)
    quantities = [item["availableQty"] for item in items]
    assert quantities == sorted(quantities, reverse=True)


def test_search_by_description_and_unknown_sort(client):
    body = client.get(
        "/inventory/search",
        params={"criteria": "zzz-not-there", "by": "Description", "sort": "color:asc"},
    ).json()
    assert body["isFailed"] is False
    assert body["data"] == {"total": 0, "items": []}


def test_forced_failure(client):
    response = client.get("/inventory/search", params={"fail": "true"})
    assert response.status_code == 400
    assert response.json() == {"data": None, "isFailed": True, "message": "Forced failure (fail=true)"}


def test_malformed_parameter_is_bad_request(client):
    response = client.get("/inventory/search", params={"page": "abc"})
    assert response.status_code == 400
    body = response.json()
    assert body["isFailed"] is True
    assert body["message"].startswith("Invalid request:")
    assert "page" in body["message"]


def test_store_error_is_server_error(seeded_items):
    client = TestClient(create_app(store=BrokenStore(seeded_items)))

    response = client.get("/inventory/search")
    assert response.status_code == 500
    assert response.json()["message"] == "disk on fire"

    response = client.get("/inventory/availability/peak", params={"partNumber": "PN-1001"})
    assert response.status_code == 500
    assert response.json()["isFailed"] is True


def test_peak_availability(client, store):
    response = client.get("/inventory/availability/peak", params={"partNumber": " pn-1001 "})

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["partNumber"] == "PN-1001"
    assert data["totalAvailable"] == sum(b["qty"] for b in data["branches"])
    assert data["totalAvailable"] == sum(item.available_qty for item in store.find_by_part_number("PN-1001"))
    quantities = [b["qty"] for b in data["branches"]]
    assert quantities == sorted(quantities, reverse=True)


@pytest.mark.parametrize("params", [{}, {"partNumber": ""}, {"partNumber": "   "}])
def test_peak_requires_part_number(client, params):
    response = client.get("/inventory/availability/peak", params=params)
    assert response.status_code == 400
    assert response.json() == {"data": None, "isFailed": True, "message": "partNumber is required"}


def test_peak_for_unknown_part(client):
    response = client.get("/inventory/availability/peak", params={"partNumber": "PN-9999"})
    assert response.status_code == 200
    assert response.json()["data"] == {"partNumber": "PN-9999", "totalAvailable": 0, "branches": []}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok", "env": get_config().app_env}


def test_health_reports_environment(store, monkeypatch):
    monkeypatch.setenv("APP_ENV", "staging")
    set_config_for_test()
    client = TestClient(create_app(store=store))
    assert client.get("/health").json()["env"] == "staging"
