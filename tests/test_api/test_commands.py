"""Tests for the command endpoint."""

import pytest
from httpx import AsyncClient


async def _command(client, headers, command, payload=None):
    response = await client.post(
        "/api/v1/commands",
        json={"command": command, "payload": payload or {}},
        headers=headers,
    )
    assert response.status_code == 200
    return response.json()["events"]


@pytest.mark.asyncio
class TestCommandEndpoint:
    """Test running grid commands over HTTP."""

    async def test_select_table_then_save(self, client: AsyncClient, auth_headers, fake_server):
        events = await _command(
            client, auth_headers, "selectTable", {"namespace": "USER", "tableName": "SQLUser.Person"}
        )
        assert [event["event"] for event in events] == [
            "tableLoading",
            "tableSchema",
            "tableData",
            "tableLoading",
        ]
        assert events[2]["payload"]["totalRows"] == 3

        events = await _command(
            client,
            auth_headers,
            "saveCell",
            {
                "rowIndex": 0,
                "colIndex": 1,
                "columnName": "Name",
                "value": "Ann",
                "oldValue": "Person 1",
                "pkColumn": "ID",
                "pkValue": 1,
            },
        )

        assert events == [
            {
                "event": "saveCellResult",
                "payload": {
                    "success": True,
                    "rowIndex": 0,
                    "colIndex": 1,
                    "columnName": "Name",
                    "oldValue": "Person 1",
                    "newValue": "Ann",
                    "primaryKeyValue": 1,
                    "seq": None,
                    "error": None,
                },
            }
        ]
        assert fake_server.statements[-1] == (
            'UPDATE "SQLUser"."Person" SET "Name" = ? WHERE "ID" = ?'
        )

    async def test_unknown_command_is_an_event(self, client: AsyncClient, auth_headers):
        events = await _command(client, auth_headers, "explode")

        assert events[0]["event"] == "error"
        assert events[0]["payload"]["code"] == "INVALID_INPUT"

    async def test_empty_command_rejected(self, client: AsyncClient, auth_headers):
        response = await client.post(
            "/api/v1/commands", json={"command": ""}, headers=auth_headers
        )

        assert response.status_code == 422

    async def test_requires_session(self, client: AsyncClient):
        response = await client.post("/api/v1/commands", json={"command": "getNamespaces"})

        assert response.status_code == 401
