"""API v1 router - aggregates all endpoint routers."""

from fastapi import APIRouter

from tableedit.api.v1.commands import router as commands_router
from tableedit.api.v1.sessions import router as sessions_router
from tableedit.api.v1.tables import router as tables_router

api_router = APIRouter()

# Include all routers
api_router.include_router(sessions_router)
api_router.include_router(tables_router)
api_router.include_router(commands_router)


@api_router.get("/")
async def api_info():
    """API information endpoint."""
    return {
        "name": "Table Editor API",
        "version": "1.0.0",
        "endpoints": {
            "sessions": "/api/v1/sessions",
            "namespaces": "/api/v1/namespaces",
            "commands": "/api/v1/commands",
        },
    }
