"""Request runner: replays a stored hook against a live endpoint.

Resolution order, each step overriding only the fields it defines:

1. Defaults: ``url`` is the caller's fallback, ``method`` is POST.
2. The hook's stored config, field by field, by presence.
3. Placeholder substitution on every header value.

The hook body is then loaded and sent, except for GET which carries no
body. Exactly one attempt is made; nothing is retried.
"""

from __future__ import annotations

import errno
import json
import logging
from typing import TYPE_CHECKING

import httpx

from captain.errors import CONNECTION_REFUSED_MESSAGE, CaptainError, InvalidInputError
from captain.models import (
    DeliveryOutcome,
    ErrorKind,
    HttpMethod,
    OperationError,
    ResolvedRequest,
)
from captain.templating.substitute import EnvironmentLookup, environ_lookup, substitute_values

if TYPE_CHECKING:
    from captain.store.config import ConfigStore
    from captain.store.hooks import HookStore

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


def is_connection_refused(exc: BaseException) -> bool:
    """Walk the cause chain of ``exc`` looking for a refused connection."""
    seen: set[int] = set()
    pending: list[BaseException] = [exc]
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, ConnectionRefusedError):
            return True
        if isinstance(current, OSError) and current.errno == errno.ECONNREFUSED:
            return True
        if isinstance(current, BaseExceptionGroup):
            pending.extend(current.exceptions)
        for linked in (current.__cause__, current.__context__):
            if linked is not None:
                pending.append(linked)
    return "connection refused" in str(exc).lower()


def check_header_encoding(headers: dict[str, str]) -> None:
    """Reject header names or values that cannot go on the wire as ASCII."""
    for key, value in headers.items():
        try:
            key.encode("ascii")
            value.encode("ascii")
        except UnicodeEncodeError as exc:
            raise InvalidInputError(
                f"Header {key!r} is not ASCII after substitution",
                detail=str(exc),
            ) from exc


class HookDispatcher:
    """Resolves a hook's effective request and sends it with httpx."""

    def __init__(
        self,
        hook_store: HookStore,
        config_store: ConfigStore,
        lookup: EnvironmentLookup = environ_lookup,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._hooks = hook_store
        self._configs = config_store
        self._lookup = lookup
        self._timeout = timeout
        self._transport = transport

    def resolve(self, name: str, fallback_url: str | None = None) -> ResolvedRequest:
        """Build the fully materialized request for ``name``.

        Raises ``HookNotFoundError``/``HookParseError`` from the stores and
        ``InvalidInputError`` for headers that are not ASCII.
        """
        url = fallback_url
        method = HttpMethod.POST
        headers: dict[str, str] | None = None
        query: dict[str, str] | None = None

        config = self._configs.read(name)
        if config is not None:
            present = config.model_fields_set
            if "url" in present and config.url is not None:
                url = config.url
            if "method" in present and config.method is not None:
                method = config.method
            if "headers" in present:
                headers = config.headers
            if "query" in present:
                query = config.query

        if headers is not None:
            headers = substitute_values(headers, self._lookup)
            check_header_encoding(headers)

        body = self._hooks.read(name)
        return ResolvedRequest(
            url=url,
            method=method,
            headers=headers,
            query=query,
            body=None if method == HttpMethod.GET else body,
        )

    async def dispatch(self, name: str, fallback_url: str | None = None) -> DeliveryOutcome:
        """Resolve and send ``name``; every failure comes back as an outcome."""
        try:
            request = self.resolve(name, fallback_url)
            if not request.url:
                raise InvalidInputError(
                    f"No URL to deliver {name} to",
                    detail="Set url in the hook config or pass a fallback URL",
                )
        except CaptainError as exc:
            logger.warning("Could not resolve %s: %s", name, exc.message)
            return DeliveryOutcome(ok=False, error=exc.to_error())

        logger.info("Sending %s as %s to %s", name, request.method.value, request.url)
        return await self._send(request)

    async def _send(self, request: ResolvedRequest) -> DeliveryOutcome:
        content: bytes | None = None
        headers = dict(request.headers or {})
        if request.method != HttpMethod.GET:
            content = json.dumps(request.body).encode()
            if not any(key.lower() == "content-type" for key in headers):
                headers["Content-Type"] = "application/json"

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                resp = await client.request(
                    method=request.method.value,
                    url=request.url or "",
                    params=request.query,
                    headers=headers,
                    content=content,
                    timeout=self._timeout,
                )
        except httpx.RequestError as exc:
            return self._transport_failure(request, exc)
        except httpx.InvalidURL as exc:
            return DeliveryOutcome(
                ok=False,
                url=request.url,
                method=request.method,
                error=OperationError(
                    kind=ErrorKind.INVALID_INPUT,
                    message=f"Invalid URL: {request.url}",
                    detail=str(exc),
                ),
            )

        logger.info("Got response %d from %s", resp.status_code, request.url)
        if not resp.content.strip():
            return DeliveryOutcome(
                ok=True, url=request.url, method=request.method, status_code=resp.status_code,
            )
        try:
            parsed = resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            return DeliveryOutcome(
                ok=False,
                url=request.url,
                method=request.method,
                status_code=resp.status_code,
                error=OperationError(
                    kind=ErrorKind.PARSE_ERROR,
                    message="Response was not valid JSON",
                    detail=f"{exc}: {resp.text[:500]}",
                ),
            )
        return DeliveryOutcome(
            ok=True,
            url=request.url,
            method=request.method,
            status_code=resp.status_code,
            response=parsed,
        )

    def _transport_failure(
        self, request: ResolvedRequest, exc: httpx.RequestError,
    ) -> DeliveryOutcome:
        logger.warning("Failed to send to %s", request.url)
        if isinstance(exc, httpx.ConnectError) and is_connection_refused(exc):
            logger.warning(CONNECTION_REFUSED_MESSAGE)
            error = OperationError(
                kind=ErrorKind.CONNECTION_REFUSED,
                message=CONNECTION_REFUSED_MESSAGE,
                detail=str(exc),
            )
        else:
            logger.warning("Unknown error: %r", exc)
            if isinstance(exc, httpx.TimeoutException):
                message = f"Request timed out after {self._timeout}s"
            else:
                message = "Unknown transport error"
            error = OperationError(
                kind=ErrorKind.UNKNOWN_TRANSPORT_ERROR,
                message=message,
                detail=f"{type(exc).__name__}: {exc}",
            )
        return DeliveryOutcome(ok=False, url=request.url, method=request.method, error=error)
