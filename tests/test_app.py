"""
Tests for application wiring: health check and error envelopes.
"""
import pytest


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["database"] == "healthy"


@pytest.mark.asyncio
async def test_unknown_route_uses_message_envelope(client):
    response = await client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert "message" in response.json()


@pytest.mark.asyncio
async def test_validation_errors_use_400(client, user_headers):
    response = await client.post("/api/cart/add", json={"quantity": "many"}, headers=user_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    assert body["errors"]
