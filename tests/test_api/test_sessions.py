"""Tests for session endpoints."""

import httpx
import pytest
from httpx import AsyncClient

CONNECT = {
    "server": {"name": "dev", "host": "iris.test", "port": 52773},
    "username": "_SYSTEM",
    "password": "SYS",
}


@pytest.mark.asyncio
class TestSessionEndpoints:
    """Test session endpoints."""

    async def test_start_session(self, client: AsyncClient, session_manager):
        """A reachable server with good credentials gets a session."""
        response = await client.post("/api/v1/sessions", json=CONNECT)

        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["server_name"] == "dev"
        assert "password" not in data
        assert len(session_manager) == 1

    async def test_bad_credentials(self, client: AsyncClient, fake_server):
        """Refused credentials report the mapped error."""
        fake_server.descriptor_response = httpx.Response(401)

        response = await client.post("/api/v1/sessions", json=CONNECT)

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["code"] == "AUTH_FAILED"
        assert detail["context"] == "testConnection"

    async def test_unreachable_server(self, client: AsyncClient, fake_server):
        fake_server.descriptor_response = httpx.Response(404)

        response = await client.post("/api/v1/sessions", json=CONNECT)

        assert response.json()["detail"]["code"] == "SERVER_UNREACHABLE"

    async def test_invalid_port(self, client: AsyncClient):
        """Out-of-range ports fail validation."""
        response = await client.post(
            "/api/v1/sessions",
            json={**CONNECT, "server": {"host": "iris.test", "port": 70000}},
        )

        assert response.status_code == 422

    async def test_end_session(self, client: AsyncClient, auth_headers, session_manager):
        """Ending a session invalidates its token."""
        response = await client.delete("/api/v1/sessions", headers=auth_headers)

        assert response.status_code == 204
        assert len(session_manager) == 0

        response = await client.get("/api/v1/namespaces", headers=auth_headers)
        assert response.status_code == 401

    async def test_missing_token(self, client: AsyncClient):
        response = await client.delete("/api/v1/sessions")

        assert response.status_code == 401

    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/namespaces",
            headers={"Authorization": "Bearer invalid_token"},
        )

        assert response.status_code == 401
