"""Pytest configuration and fixtures."""

from typing import AsyncGenerator, List

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tableedit.api.deps import get_session_manager
from tableedit.main import app
from tableedit.schemas.server import ServerSpec
from tableedit.schemas.table import ColumnInfo, TableSchema
from tableedit.services.session_manager import SessionManager
from tableedit.services.transport import TransportClient
from fakes import FakeServer


@pytest.fixture
def fake_server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def server_spec() -> ServerSpec:
    return ServerSpec(name="test", host="iris.test", port=52773)


@pytest.fixture
def person_schema() -> TableSchema:
    """Schema matching FakeServer's Person table."""
    return TableSchema(
        table_name="SQLUser.Person",
        namespace="USER",
        columns=[
            ColumnInfo(name="ID", data_type="INTEGER", nullable=False, read_only=True),
            ColumnInfo(name="Name", data_type="VARCHAR", max_length=50),
            ColumnInfo(name="Age", data_type="INTEGER"),
            ColumnInfo(name="Active", data_type="BIT"),
            ColumnInfo(name="Born", data_type="DATE"),
        ],
    )


@pytest_asyncio.fixture(scope="function")
async def transport(fake_server, server_spec) -> AsyncGenerator[TransportClient, None]:
    """Transport client talking to the fake server."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_server.handle))
    async with TransportClient(server_spec, "_SYSTEM", "SYS", client=http_client) as client:
        yield client
    await http_client.aclose()


@pytest_asyncio.fixture(scope="function")
async def session_manager(fake_server) -> AsyncGenerator[SessionManager, None]:
    """Session manager whose transports all reach the fake server."""
    http_clients: List[httpx.AsyncClient] = []

    def transport_factory(spec, username, password) -> TransportClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_server.handle))
        http_clients.append(http_client)
        return TransportClient(spec, username, password, client=http_client)

    manager = SessionManager(transport_factory=transport_factory)
    yield manager

    await manager.close_all()
    for http_client in http_clients:
        await http_client.aclose()


@pytest_asyncio.fixture(scope="function")
async def client(session_manager) -> AsyncGenerator[AsyncClient, None]:
    """Get test HTTP client."""
    app.dependency_overrides[get_session_manager] = lambda: session_manager

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def auth_headers(client) -> dict:
    """Open a session and return its authorization headers."""
    response = await client.post(
        "/api/v1/sessions",
        json={
            "server": {"name": "test", "host": "iris.test", "port": 52773},
            "username": "_SYSTEM",
            "password": "SYS",
        },
    )
    token = response.json()["access_token"]
    return {"Authorization": f"Bearer {token}"}
