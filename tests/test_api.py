"""Tests for the HTTP API"""
import pytest
from fastapi.testclient import TestClient

from mumu.main import app, get_catalog, get_repository, get_ticket_rules
from mumu.utils.database import InMemoryVisitRepository

NOW = "2026-03-04T09:00:00+00:00"


@pytest.fixture
def client(catalog, ticket_rules):
    repository = InMemoryVisitRepository()
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_ticket_rules] = lambda: ticket_rules
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def visit_payload():
    return {
        "date_mode": "fixed",
        "start_date": "2026-03-05",
        "end_date": "2026-03-07",
        "stops": [{"city": "Chicago", "state": "Illinois", "radius_km": 25}],
        "mode": "money",
    }


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_eligibility_catalog(client):
    response = client.get("/eligibility/catalog")
    assert response.status_code == 200
    types = [item["type"] for category in response.json() for item in category["items"]]
    assert "snap_ebt" in types


def test_catalog_offers_citypass_cities(client):
    """The CityPass item carries its city list so the client can offer it as choices"""
    response = client.get("/eligibility/catalog")
    items = {item["type"]: item for category in response.json() for item in category["items"]}
    assert "Chicago" in items["city_pass"]["suggestions"]
    assert items["city_pass"]["has_details"] == "cities"
    assert items["city_id"]["suggestions"] == []


def test_visit_crud(client, visit_payload):
    created = client.post("/visits", json=visit_payload)
    assert created.status_code == 201
    visit_id = created.json()["id"]

    assert client.get(f"/visits/{visit_id}").json()["stops"][0]["city"] == "Chicago"
    assert [v["id"] for v in client.get("/visits").json()] == [visit_id]

    updated = client.put(f"/visits/{visit_id}", json={"name": "Spring break"})
    assert updated.status_code == 200
    assert updated.json()["name"] == "Spring break"

    assert client.delete(f"/visits/{visit_id}").status_code == 200
    assert client.get(f"/visits/{visit_id}").status_code == 404


def test_invalid_update(client, visit_payload):
    visit_id = client.post("/visits", json=visit_payload).json()["id"]
    response = client.put(f"/visits/{visit_id}", json={"flexible_days": 99})
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "ValidationError"


def test_unknown_visit(client):
    response = client.post("/visits/missing/duplicate")
    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "NotFound"


def test_generate(client, visit_payload):
    visit_id = client.post("/visits", json=visit_payload).json()["id"]
    response = client.post(
        f"/visits/{visit_id}/generate",
        json={"discounts": ['{"type": "snap_ebt", "lifetime": true}'], "now": NOW},
    )
    assert response.status_code == 200

    body = response.json()
    assert body["visit"]["generated_at"] is not None
    assert len(body["visit"]["itinerary"]) == 3
    assert body["visit"]["name"] == "Chicago (Mar 5–Mar 7)"
    assert body["totals"]["unknown_count"] >= 1

    stored = client.get(f"/visits/{visit_id}").json()
    assert stored["itinerary"] == body["visit"]["itinerary"]


def test_generate_rejects_reversed_dates(client, visit_payload):
    visit_payload.update({"start_date": "2026-03-07", "end_date": "2026-03-05"})
    visit_id = client.post("/visits", json=visit_payload).json()["id"]
    response = client.post(f"/visits/{visit_id}/generate", json={"now": NOW})
    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "End date cannot be before start date"


def test_duplicate_after_generate(client, visit_payload):
    visit_id = client.post("/visits", json=visit_payload).json()["id"]
    client.post(f"/visits/{visit_id}/generate", json={"now": NOW})

    copy = client.post(f"/visits/{visit_id}/duplicate")
    assert copy.status_code == 201
    assert copy.json()["id"] != visit_id
    assert copy.json()["itinerary"] is None
    assert copy.json()["name"].endswith(" (copy)")


def test_museum_discounts(client):
    response = client.post(
        "/museums/art-institute-of-chicago/discounts",
        json={"discounts": ['{"type": "bofa_museums_on_us", "lifetime": true}'], "now": "2026-03-18T12:00:00+00:00"},
    )
    assert response.status_code == 200

    body = response.json()
    assert body["rules_available"] is True
    assert body["base_price"] == 32
    bofa = next(row for row in body["rows"] if row["id"] == "bofa_weekend")
    assert bofa["qualifies"] is False
    assert bofa["next_eligible"] == "2026-04-04"


def test_museum_without_rules(client):
    response = client.post("/museums/block-museum/discounts", json={})
    assert response.status_code == 200
    assert response.json()["rules_available"] is False
    assert response.json()["best_price"]["price"] is None
