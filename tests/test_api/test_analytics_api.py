"""Tests for Analytics API endpoints."""
import uuid

import pytest
from httpx import AsyncClient

from tests.conftest import make_property_payload


async def _create(client: AsyncClient, **overrides) -> dict:
    response = await client.post("/api/v1/properties", json=make_property_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.mark.asyncio
async def test_market_analytics(client: AsyncClient):
    await _create(client, price=100)
    await _create(client, price=300)
    await _create(client, propertyType="villa", price=1000, district="Hillside")
    await _create(client, price=999_999, status="sold")

    response = await client.get("/api/v1/analytics/market")
    assert response.status_code == 200
    data = response.json()["data"]

    by_type = {row["type"]: row for row in data["avgPricesByType"]}
    assert by_type["apartment"]["avgPrice"] == 200
    assert by_type["apartment"]["count"] == 2
    assert by_type["villa"]["count"] == 1

    assert data["popularAreas"][0] == {"district": "Old Town", "count": 2, "avgPrice": 200}
    assert sum(trend["count"] for trend in data["priceTrends"]) == 3
    assert {row["type"]: row["count"] for row in data["typeDistribution"]} == {"apartment": 2, "villa": 1}


@pytest.mark.asyncio
async def test_market_analytics_by_district(client: AsyncClient):
    await _create(client, price=100)
    await _create(client, propertyType="villa", price=1000, district="Hillside")

    response = await client.get("/api/v1/analytics/market", params={"district": "Hillside"})
    data = response.json()["data"]
    assert [row["type"] for row in data["typeDistribution"]] == ["villa"]


@pytest.mark.asyncio
async def test_investment_analysis(client: AsyncClient):
    target = await _create(client, price=1_200_000, yearBuilt=2020, parkingSpaces=1, hasElevator=True)
    await _create(client, price=1_200_000)

    response = await client.get(f"/api/v1/analytics/properties/{target['id']}/investment")
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["estimatedMonthlyRent"] == 800
    assert data["annualRent"] == 9_600
    assert data["rentalYield"] == 0.8
    assert data["priceVsMarket"] == 0
    # 50 base - 10 low yield + 5 elevator + 5 parking + 10 recent build
    assert data["investmentScore"] == 60
    assert data["recommendations"][0] == "Sound investment - balanced risk"


@pytest.mark.asyncio
async def test_investment_analysis_not_found(client: AsyncClient):
    response = await client.get(f"/api/v1/analytics/properties/{uuid.uuid4()}/investment")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_property_report(client: AsyncClient):
    target = await _create(client, price=1_000, area=100, yearBuilt=2000, floorNumber=2, totalFloors=5)
    await _create(client, price=1_100, area=100)
    await _create(client, price=900, area=90)
    await _create(client, price=5_000, area=100)

    await client.post(f"/api/v1/properties/{target['id']}/views")

    response = await client.get(f"/api/v1/analytics/properties/{target['id']}/report")
    assert response.status_code == 200
    report = response.json()["data"]

    assert report["property"]["id"] == target["id"]
    assert sorted(p["price"] for p in report["similarProperties"]) == [900, 1_100]
    assert sum(day["views"] for day in report["viewStats"]) == 1

    position = report["marketPosition"]
    assert position["totalInArea"] == 4
    assert position["percentile"] == 25
    assert position["position"] == "mid-range"

    metrics = report["investmentMetrics"]
    assert metrics["pricePerSqm"] == 10
    assert metrics["priceVsSimilar"] == 0

    technical = report["technicalAnalysis"]
    assert technical["condition"] == "older"
    assert technical["floorInfo"] == "2/5"
    assert technical["features"]["hasParking"] is True
    assert technical["amenitiesCount"] == 2
