"""Tests for the engine/handler bridge against the fake server."""

import asyncio

import httpx
import pytest

from gridsync.bridge import GridBridge
from gridsync.state import CellPosition, CellStatus
from tableedit.services.command_handler import CommandHandler
from tableedit.services.transport import TransportClient
from fakes import atelier_error


@pytest.fixture
def bridge(transport):
    return GridBridge(CommandHandler(transport, page_size=2))


async def _load(bridge):
    bridge.engine.load_table("USER", "SQLUser.Person")
    await bridge.drain()
    return bridge.engine


@pytest.mark.asyncio
class TestGridBridge:
    """Test full round trips through the command handler."""

    async def test_load_table(self, bridge):
        engine = await _load(bridge)

        assert engine.schema.table_name == "SQLUser.Person"
        assert [row["ID"] for row in engine.rows] == [1, 2]
        assert engine.total_rows == 3
        assert engine.total_pages == 2
        assert engine.loading is False
        assert bridge.pending == 0

    async def test_next_page(self, bridge):
        engine = await _load(bridge)

        engine.next_page()
        await bridge.drain()

        assert engine.page == 1
        assert [row["ID"] for row in engine.rows] == [3]
        assert engine.pagination_loading is False

    async def test_save_cell(self, bridge, fake_server):
        engine = await _load(bridge)

        engine.begin_edit(0, 1)
        engine.set_edit_text("Ann")
        engine.commit_edit()
        await bridge.drain()

        assert engine.cell_flags[CellPosition(0, 1)].status is CellStatus.SAVED
        assert len(engine.ledger) == 0
        assert fake_server.queries[-1] == {
            "query": 'UPDATE "SQLUser"."Person" SET "Name" = ? WHERE "ID" = ?',
            "parameters": ["Ann", 1],
        }

    async def test_failed_save_rolls_back(self, bridge, fake_server):
        engine = await _load(bridge)
        fake_server.query_handler = lambda query, parameters: atelier_error(
            "UNIQUE constraint failed"
        )

        engine.begin_edit(0, 1)
        engine.set_edit_text("Person 2")
        engine.commit_edit()
        await bridge.drain()

        assert engine.rows[0]["Name"] == "Person 1"
        assert engine.notifications[0].code == "CONSTRAINT_VIOLATION"

    async def test_superseded_read_is_cancelled(self, bridge, fake_server):
        engine = await _load(bridge)
        queries_before = len(fake_server.queries)

        engine.request_page(1)
        engine.request_page(0)
        await bridge.drain()

        assert engine.page == 0
        assert [row["ID"] for row in engine.rows] == [1, 2]
        assert engine.notifications == []
        assert len(fake_server.queries) - queries_before == 2

    async def test_insert_row_then_refresh(self, bridge, fake_server):
        engine = await _load(bridge)

        row = engine.add_row()
        engine.set_edit_text("Zed")
        engine.save_row(row)
        await bridge.drain()

        assert engine.staged == []
        inserts = [q for q in fake_server.queries if q["query"].startswith("INSERT")]
        assert inserts == [
            {
                "query": 'INSERT INTO "SQLUser"."Person" ("Name", "Age", "Active", "Born") '
                "VALUES (?, ?, ?, ?)",
                "parameters": ["Zed", None, None, None],
            }
        ]
        assert fake_server.statements[-1].startswith("SELECT COUNT(*)")

    async def test_delete_row(self, bridge, fake_server):
        engine = await _load(bridge)

        engine.select_row(1)
        engine.request_delete()
        engine.confirm_delete()
        await bridge.drain()

        assert 'DELETE FROM "SQLUser"."Person" WHERE "ID" = ?' in fake_server.statements
        assert engine.delete_in_progress is False
        assert engine.notifications == []

    async def test_namespace_and_table_lists(self, bridge):
        bridge.engine.request_namespaces()
        bridge.engine.request_tables("USER")
        await bridge.drain()

        assert bridge.engine.namespaces == ["USER", "%SYS"]
        assert bridge.engine.tables == ["SQLUser.Person", "Sample.Company"]

    async def test_table_switch_drops_pending_read(self, fake_server, server_spec):
        slow = {"person_pages": False}

        async def handle(request):
            body = request.content
            if slow["person_pages"] and b"SELECT TOP" in body and b"Person" in body:
                await asyncio.sleep(10)
            return fake_server.handle(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handle))
        transport = TransportClient(server_spec, "_SYSTEM", "SYS", client=http_client)
        bridge = GridBridge(CommandHandler(transport, page_size=2))
        try:
            engine = await _load(bridge)
            slow["person_pages"] = True
            engine.refresh()
            await asyncio.sleep(0.05)

            engine.load_table("USER", "Sample.Company")
            await asyncio.wait_for(bridge.drain(), timeout=5)
        finally:
            await http_client.aclose()

        assert engine.schema.table_name == "Sample.Company"
        assert engine.rows == [{"ID": 100, "Title": "Acme"}]
        assert engine.total_rows == 1
        assert engine.notifications == []
        assert bridge.handler.context.table_name == "Sample.Company"
