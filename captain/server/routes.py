"""Hook API endpoints.

Provides endpoints for:
- Listing and reading stored hooks
- Creating and updating hooks and their configs
- Running a hook against a target URL
- Seeding the bundled sample hooks
- Opening the hooks directory on the host
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, JsonValue

from captain.models import ErrorKind, HookConfig, OperationResult

if TYPE_CHECKING:
    from captain.service import HookService

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.PARSE_ERROR: 422,
    ErrorKind.CONNECTION_REFUSED: 502,
    ErrorKind.UNKNOWN_TRANSPORT_ERROR: 502,
}


class CreateHookRequest(BaseModel):
    name: str
    body: JsonValue
    config: HookConfig | None = None


class UpdateHookRequest(BaseModel):
    body: JsonValue = None
    config: HookConfig | None = None


class RunHookRequest(BaseModel):
    url: str | None = None


class OpenLocationRequest(BaseModel):
    path: str = ""


def to_response(result: OperationResult) -> JSONResponse:
    """Serialize a result, mapping a failure's kind onto an HTTP status."""
    status_code = 200
    if not result.ok and result.error is not None:
        status_code = _STATUS_BY_KIND[result.error.kind]
    return JSONResponse(
        result.model_dump(mode="json"),
        status_code=status_code,
    )


def create_hooks_router(service: HookService) -> APIRouter:
    """Create the hooks API router."""
    router = APIRouter()

    @router.get("/hooks")
    def list_hooks() -> JSONResponse:
        return to_response(service.list_hooks())

    @router.get("/hooks/{name}")
    def read_hook(name: str) -> JSONResponse:
        return to_response(service.read_hook(name))

    @router.post("/hooks")
    def create_hook(payload: CreateHookRequest) -> JSONResponse:
        return to_response(service.create_hook(payload.name, payload.body, payload.config))

    @router.patch("/hooks/{name}")
    def update_hook(name: str, payload: UpdateHookRequest) -> JSONResponse:
        body = payload.body if "body" in payload.model_fields_set else {}
        return to_response(service.update_hook(name, body, payload.config))

    @router.post("/hooks/{name}/run")
    async def run_hook(name: str, payload: RunHookRequest | None = None) -> JSONResponse:
        url = payload.url if payload is not None else None
        result = await service.dispatch(name, url)
        if not result.ok and result.error is not None:
            logger.warning("Run of %s failed: %s", name, result.error.message)
        return to_response(result)

    @router.post("/hooks/samples")
    def seed_sample_hooks() -> JSONResponse:
        return to_response(service.seed_sample_hooks())

    @router.post("/storage/open")
    def open_storage_location(payload: OpenLocationRequest) -> JSONResponse:
        return to_response(service.open_storage_location(payload.path))

    return router
