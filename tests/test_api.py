"""HTTP-level tests for the catalog API routes and error mapping."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from listd.config import Settings
from listd.error_handling import ExecutionError
from listd.main import create_app
from listd.routers.dependencies import (
    get_listing_service,
    get_reference_service,
    get_valuation_service,
)
from listd.services import ListingSearchService, ReferenceDataService, ValuationService
from tests.fakes import FakeConnection, FakePool


@pytest.fixture
def app():
    return create_app(Settings())


@pytest.fixture
def client(app):
    return TestClient(app)


def override(app, dependency, service):
    app.dependency_overrides[dependency] = lambda: service


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": "0.1.0"}


def test_missing_database_reports_configuration_error(client):
    response = client.get("/property-listings")

    assert response.status_code == 500
    assert response.json() == {"message": "Database URL not defined."}


def test_invalid_parameter_is_a_400(app, client):
    override(app, get_listing_service, ListingSearchService(FakePool(FakeConnection({}))))

    response = client.get("/property-listings", params={"property_type": "villa"})

    assert response.status_code == 400
    message = response.json()["message"]
    assert message.startswith("[property_type]: ")
    assert message == message.lower()


def test_invalid_path_parameter_is_a_400(app, client):
    override(app, get_listing_service, ListingSearchService(FakePool(FakeConnection({}))))

    response = client.get("/property-listings/abc")

    assert response.status_code == 400
    assert response.json()["message"].startswith("[listing_id]: ")


def test_house_bedroom_search(app, client):
    conn = FakeConnection({
        "COUNT(*)": 2,
        "SELECT": [
            {"id": 4, "listing_title": "House 4", "price": Decimal("3200000"), "bedrooms": 3},
            {"id": 1, "listing_title": "House 1", "price": Decimal("2100000"), "bedrooms": 2},
        ],
    })
    override(app, get_listing_service, ListingSearchService(FakePool(conn)))

    response = client.get("/property-listings", params={
        "property_type": "house",
        "min_bedrooms": "2",
        "max_bedrooms": "3",
    })

    assert response.status_code == 200
    body = response.json()
    assert body["count"] == 2
    assert body["before"] == 4
    assert body["after"] == 1
    assert [row["id"] for row in body["data"]] == [4, 1]

    _, sql, params = conn.statements("ORDER BY")[0]
    assert "property_type.slug = $3" in sql
    assert params[2:5] == ("house", 2, 3)


def test_store_failure_hides_details(app, client):
    conn = FakeConnection({"COUNT(*)": OSError("password authentication failed"), "SELECT": []})
    override(app, get_listing_service, ListingSearchService(FakePool(conn)))

    response = client.get("/property-listings")

    assert response.status_code == 500
    assert response.json() == {"message": "Something went wrong."}


def test_unexpected_error_is_generic(app):
    class BrokenService:
        async def search(self, criteria):
            raise RuntimeError("boom")

    override(app, get_listing_service, BrokenService())
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/property-listings")

    assert response.status_code == 500
    assert response.json() == {"message": "Something went wrong."}


def test_get_listing(app, client):
    conn = FakeConnection({"WHERE listing.id = $1": {"id": 7, "listing_title": "Loft", "property_images": None}})
    override(app, get_listing_service, ListingSearchService(FakePool(conn)))

    response = client.get("/property-listings/7")

    assert response.status_code == 200
    assert response.json()["data"]["listing_title"] == "Loft"


def test_get_listing_not_found(app, client):
    conn = FakeConnection({"WHERE listing.id = $1": None})
    override(app, get_listing_service, ListingSearchService(FakePool(conn)))

    response = client.get("/property-listings/99")

    assert response.status_code == 404
    assert response.json() == {"message": "Listing not found."}


def test_property_valuation(app, client):
    conn = FakeConnection({"AVG(": Decimal("3000000"), "WITH comparables": []})
    override(app, get_valuation_service, ValuationService(FakePool(conn)))

    response = client.get("/property-valuation", params={
        "property_type": "condominium",
        "sqm": "60",
        "city": "Taguig",
        "address": "BGC",
    })

    assert response.status_code == 200
    valuation = response.json()["data"]["valuation"]
    assert valuation["sale"]["average_price"] == "₱3,000,000.00"
    assert valuation["sale"]["price_per_sqm"] == "₱50,000.00"
    assert valuation["rent"]["similar_properties"] == []
    assert valuation["property_type"] == "condominium"
    assert valuation["sqm"] == 60.0


def test_property_valuation_requires_area(app, client):
    override(app, get_valuation_service, ValuationService(FakePool(FakeConnection({}))))

    response = client.get("/property-valuation", params={
        "property_type": "house",
        "city": "Taguig",
        "address": "BGC",
    })

    assert response.status_code == 400
    assert response.json() == {"message": "[sqm]: field required"}


def test_valuation_store_failure(app, client):
    class FailingService:
        async def valuate(self, request):
            raise ExecutionError("Valuation failed: connection reset")

    override(app, get_valuation_service, FailingService())

    response = client.get("/property-valuation", params={
        "property_type": "house",
        "sqm": "120",
        "city": "Taguig",
        "address": "BGC",
    })

    assert response.status_code == 500
    assert response.json() == {"message": "Something went wrong."}


def test_reference_lists(app, client):
    conn = FakeConnection({
        "FROM cities": [{"id": 1, "name": "Cebu City", "region": "Central Visayas"}],
        "FROM property_types": [{"id": 1, "name": "House", "slug": "house"}],
    })
    override(app, get_reference_service, ReferenceDataService(FakePool(conn)))

    cities = client.get("/listing-cities")
    types = client.get("/property-types")

    assert cities.json() == {"data": [{"id": 1, "name": "Cebu City", "region": "Central Visayas"}]}
    assert types.json()["data"][0]["slug"] == "house"


def test_out_of_range_count_is_a_400(app, client):
    override(app, get_listing_service, ListingSearchService(FakePool(FakeConnection({}))))

    response = client.get("/property-listings", params={"min_bedrooms": "1", "max_bedrooms": "99999999999"})

    assert response.status_code == 400
    assert response.json() == {"message": "[max_bedrooms]: input should be less than or equal to 2147483647"}
