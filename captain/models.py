"""Shared Pydantic data models for captain-hooks."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, JsonValue

# --- Enums ---


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    PARSE_ERROR = "parse_error"
    CONNECTION_REFUSED = "connection_refused"
    UNKNOWN_TRANSPORT_ERROR = "unknown_transport_error"
    INVALID_INPUT = "invalid_input"


class ActivityEventType(str, Enum):
    HOOK_CREATED = "hook_created"
    HOOK_UPDATED = "hook_updated"
    CONFIG_WRITTEN = "config_written"
    DELIVERY = "delivery"


# --- Hook Models ---


class Hook(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    body: JsonValue


class HookConfig(BaseModel):
    """Per-hook delivery settings stored in ``<name>.config.json``.

    Every field is optional. Which fields a caller actually supplied is
    tracked by ``model_fields_set``, so an explicit ``""`` or ``{}`` is
    distinguishable from an absent field.
    """

    model_config = ConfigDict(extra="ignore")

    url: str | None = None
    method: HttpMethod | None = None
    query: dict[str, str] | None = None
    headers: dict[str, str] | None = None

    def supplied(self) -> dict[str, object]:
        """Fields explicitly present, serialized for storage."""
        return self.model_dump(mode="json", include=self.model_fields_set)


class HookDetail(BaseModel):
    name: str
    body: JsonValue
    config: HookConfig | None = None


# --- Dispatch Models ---


class ResolvedRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str | None
    method: HttpMethod
    headers: dict[str, str] | None = None
    query: dict[str, str] | None = None
    body: JsonValue = None


class OperationError(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    message: str
    detail: str | None = None


class DeliveryOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool
    url: str | None = None
    method: HttpMethod | None = None
    status_code: int | None = None
    response: JsonValue = None
    error: OperationError | None = None


T = TypeVar("T")


class OperationResult(BaseModel, Generic[T]):
    """Success/error discriminator returned across the transport boundary."""

    ok: bool
    data: T | None = None
    error: OperationError | None = None

    @classmethod
    def success(cls, data: T | None = None) -> OperationResult[T]:
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: OperationError) -> OperationResult[T]:
        return cls(ok=False, error=error)


# --- Activity Models ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class ActivityEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: ActivityEventType
    hook: str
    action: str
    result: str  # "success" | "failure" | "skipped"
    details: dict[str, object] | None = None
