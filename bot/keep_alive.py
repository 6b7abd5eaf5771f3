"""
Status web server.
Health checks plus read-only views of commands and balances.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from bot.config import config
from bot.database import is_connected
from utils.logger import get_logger
from utils.validation import ValidationUtils

logger = get_logger("KeepAlive")

VERSION = "1.0.0"

# Track bot status
_bot_status: Dict[str, Any] = {
    "status": "starting",
    "discord_connected": False,
}

# Framework objects exposed read-only: registry, ledger, monitoring
_services: Dict[str, Any] = {}


def update_bot_status(**kwargs):
    """Update bot status for health endpoint."""
    _bot_status.update(kwargs)


def register_services(**kwargs):
    """Expose framework objects to the status endpoints."""
    _services.update(kwargs)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown events."""
    logger.info("Status server starting...")
    yield
    logger.info("Status server shutting down...")


app = FastAPI(
    title="Guild Bot",
    description="Guild bot status server",
    version=VERSION,
    lifespan=lifespan,
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Guild Bot",
        "version": VERSION,
        "status": _bot_status.get("status", "unknown"),
    }


@app.get("/health")
async def health():
    """Health check endpoint for monitoring."""
    database_ok = is_connected() or not config.DATABASE_URL
    discord_ok = bool(_bot_status.get("discord_connected"))
    healthy = database_ok and discord_ok

    content: Dict[str, Any] = {
        "status": "healthy" if healthy else "degraded",
        "discord": "connected" if discord_ok else "disconnected",
        "database": "connected" if is_connected() else ("memory" if database_ok else "disconnected"),
    }
    monitoring = _services.get("monitoring")
    if monitoring is not None:
        content["metrics"] = monitoring.get_app_metrics()

    return JSONResponse(status_code=200 if healthy else 503, content=content)


@app.get("/ping")
async def ping():
    """Simple ping endpoint."""
    return {"pong": True}


@app.get("/commands")
async def list_commands():
    """Registered commands in registration order."""
    registry = _services.get("registry")
    if registry is None:
        raise HTTPException(status_code=503, detail="Commands not loaded")

    return [
        {
            "name": cmd.name,
            "aliases": list(cmd.aliases),
            "category": cmd.category,
            "description": cmd.description,
            "usage": cmd.usage,
            "level": str(cmd.min_level),
            "cost": cmd.cost.amount if cmd.cost.is_fixed else None,
        }
        for cmd in registry.list_commands()
    ]


@app.get("/balance/{user_id}")
async def balance(user_id: str):
    """A user's credit balance."""
    ledger = _services.get("ledger")
    if ledger is None:
        raise HTTPException(status_code=503, detail="Economy not available")
    if not ValidationUtils.is_valid_snowflake(user_id):
        raise HTTPException(status_code=400, detail="Invalid user ID format")

    return {"user_id": user_id, "balance": await ledger.get_balance(user_id)}


async def start_server():
    """Start the status server."""
    import uvicorn

    config_uvicorn = uvicorn.Config(
        app,
        host=config.HOST,
        port=config.PORT,
        log_level="warning",
        access_log=False,
    )
    server = uvicorn.Server(config_uvicorn)

    logger.info(f"Status server listening on port {config.PORT}")
    await server.serve()


def run_server() -> asyncio.Task:
    """Run server in background task."""
    return asyncio.create_task(start_server())
