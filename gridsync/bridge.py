"""Connects an edit engine to a command handler on one asyncio loop."""

import asyncio
import logging
from typing import Any, Dict, Optional, Set

from tableedit.schemas.messages import PAGE_LOAD_COMMANDS
from tableedit.services.command_handler import CommandHandler

from gridsync.engine import EditSyncEngine

logger = logging.getLogger("gridsync")


class GridBridge:
    """
    Runs every command the engine dispatches as its own task and feeds the
    resulting events back into the engine in the order the handler returned them.

    Saves and page loads run independently. A new page load, including a table
    switch, cancels the load still in flight, and a cancelled load delivers no
    events, so only the latest page request lands.
    """

    def __init__(self, handler: CommandHandler, page_size: Optional[int] = None):
        self.handler = handler
        self.engine = EditSyncEngine(self.dispatch, page_size=page_size or handler.page_size)
        self._tasks: Set[asyncio.Task] = set()
        self._read_cancel: Optional[asyncio.Event] = None

    def dispatch(self, command: str, payload: Dict[str, Any]) -> None:
        cancel_event = None
        if command in PAGE_LOAD_COMMANDS:
            if self._read_cancel is not None:
                self._read_cancel.set()
            cancel_event = self._read_cancel = asyncio.Event()

        task = asyncio.ensure_future(self._run(command, payload, cancel_event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(
        self,
        command: str,
        payload: Dict[str, Any],
        cancel_event: Optional[asyncio.Event],
    ) -> None:
        events = await self.handler.handle(command, payload, cancel_event=cancel_event)
        if cancel_event is not None and cancel_event.is_set():
            logger.debug(f"{command} superseded; dropping {len(events)} events")
            return
        for event in events:
            self.engine.handle_event(event.event, event.payload)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait until every dispatched command, including follow-ups, has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))
