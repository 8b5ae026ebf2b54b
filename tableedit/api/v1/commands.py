"""Grid command endpoint."""

import logging

from fastapi import APIRouter

from tableedit.api.deps import CurrentSession
from tableedit.schemas.messages import Command, CommandResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/commands", tags=["commands"])


@router.post("", response_model=CommandResponse)
async def run_command(command: Command, session: CurrentSession) -> CommandResponse:
    """
    Run one grid command against the session's current table.

    Failures are reported as ``error`` or result events, never as HTTP errors.
    """
    events = await session.handler.handle(command.command, command.payload)
    logger.debug(f"{command.command}: {[event.event for event in events]}")
    return CommandResponse(events=events)
