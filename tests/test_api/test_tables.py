"""Tests for namespace and table endpoints."""

import pytest
from httpx import AsyncClient

from fakes import atelier_error


@pytest.mark.asyncio
class TestTableEndpoints:
    """Test explorer endpoints."""

    async def test_list_namespaces(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/v1/namespaces", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == ["USER", "%SYS"]

    async def test_list_tables(self, client: AsyncClient, auth_headers):
        response = await client.get("/api/v1/namespaces/USER/tables", headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == ["SQLUser.Person", "Sample.Company"]

    async def test_percent_namespace(self, client: AsyncClient, auth_headers, fake_server):
        response = await client.get("/api/v1/namespaces/%25SYS/tables", headers=auth_headers)

        assert response.status_code == 200
        assert fake_server.requests[-1].url.raw_path == b"/api/atelier/v1/%25SYS/action/query"

    async def test_table_schema(self, client: AsyncClient, auth_headers):
        response = await client.get(
            "/api/v1/namespaces/USER/tables/SQLUser.Person/schema",
            headers=auth_headers,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["tableName"] == "SQLUser.Person"
        assert data["namespace"] == "USER"
        assert data["columns"][0] == {
            "name": "ID",
            "dataType": "INTEGER",
            "nullable": False,
            "maxLength": None,
            "precision": 10,
            "scale": 0,
            "readOnly": True,
        }

    async def test_upstream_error(self, client: AsyncClient, auth_headers, fake_server):
        fake_server.query_handler = lambda query, parameters: atelier_error("SQLCODE: -30")

        response = await client.get("/api/v1/namespaces/USER/tables", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "INVALID_INPUT"

    async def test_requires_session(self, client: AsyncClient):
        response = await client.get("/api/v1/namespaces")

        assert response.status_code == 401
