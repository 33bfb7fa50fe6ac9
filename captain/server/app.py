"""FastAPI application exposing the hook service as JSON routes."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from captain.config import Settings
from captain.server.routes import create_hooks_router
from captain.service import HookService


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    settings = Settings.from_env()
    return create_app(HookService.from_settings(settings))


def create_app(service: HookService) -> FastAPI:
    """Create the hook runner FastAPI app."""
    app = FastAPI(title="captain-hooks", docs_url=None, redoc_url=None)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api")
    async def ping() -> JSONResponse:
        return JSONResponse("pong")

    app.include_router(create_hooks_router(service))

    # The browser UI is served from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app
