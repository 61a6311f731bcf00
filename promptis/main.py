"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
import uvicorn
from fastapi import Depends, FastAPI

from promptis import __version__
from promptis.commands import router as commands_router
from promptis.config import ConfigurationStore, Settings, get_settings
from promptis.logging import configure_logging
from promptis.websocket_handlers import chat_endpoint


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create application resources during startup and clean up on shutdown."""

    async with httpx.AsyncClient() as client:
        app.state.http_client = client
        yield
        del app.state.http_client


def create_app() -> FastAPI:
    """Application factory."""

    settings = get_settings()
    configure_logging(settings.log_level, json_lines=settings.log_json)

    app = FastAPI(
        title="Promptis prompt runner",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.configuration = ConfigurationStore(settings.prompt_directory)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/version")
    async def version(settings: Settings = Depends(get_settings)) -> dict[str, str]:
        return {"version": __version__, "environment": settings.environment}

    app.include_router(commands_router)
    app.add_api_websocket_route("/chat/{participant_id}", chat_endpoint)

    return app


def run() -> None:
    """Serve the application with uvicorn."""

    settings = get_settings()
    uvicorn.run("promptis.main:app", host="127.0.0.1", port=settings.port)


app = create_app()
