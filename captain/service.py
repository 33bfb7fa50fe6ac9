"""Hook service: the operations exposed to the HTTP app and the CLI.

Every method returns an ``OperationResult``. Store errors are caught here
and turned into a structured error, so nothing opaque crosses the
transport boundary.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from pydantic import JsonValue

from captain.audit.logger import ActivityLogger
from captain.config import Settings
from captain.dispatch.runner import HookDispatcher
from captain.errors import CaptainError, HookNotFoundError, InvalidInputError
from captain.models import (
    ActivityEvent,
    ActivityEventType,
    DeliveryOutcome,
    Hook,
    HookConfig,
    HookDetail,
    OperationResult,
)
from captain.samples import SAMPLE_HOOKS
from captain.store.config import ConfigStore
from captain.store.files import normalize_name
from captain.store.hooks import HookStore
from captain.templating.substitute import EnvironmentLookup, environ_lookup

logger = logging.getLogger(__name__)

Launcher = Callable[[str], Any]


def _launch_in_file_manager(path: str) -> int:
    return click.launch(path, locate=True)


def parse_body(body: JsonValue) -> JsonValue:
    """Accept a body as a JSON string or as an already-decoded value."""
    if isinstance(body, str):
        try:
            return json.loads(body)
        except json.JSONDecodeError as exc:
            raise InvalidInputError("Body is not valid JSON", detail=str(exc)) from exc
    return body


class HookService:
    """Lists, reads, writes and dispatches hooks in one storage root."""

    def __init__(
        self,
        hook_store: HookStore,
        config_store: ConfigStore,
        dispatcher: HookDispatcher,
        activity_logger: ActivityLogger | None = None,
        launcher: Launcher = _launch_in_file_manager,
    ) -> None:
        self.hooks = hook_store
        self.configs = config_store
        self.dispatcher = dispatcher
        self._activity = activity_logger
        self._launcher = launcher

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        lookup: EnvironmentLookup = environ_lookup,
        launcher: Launcher = _launch_in_file_manager,
    ) -> HookService:
        hook_store = HookStore(settings.hooks_dir)
        config_store = ConfigStore(settings.hooks_dir)
        dispatcher = HookDispatcher(
            hook_store, config_store, lookup=lookup, timeout=settings.timeout,
        )
        activity = (
            ActivityLogger.from_env(settings.activity_log) if settings.activity_log else None
        )
        return cls(hook_store, config_store, dispatcher, activity, launcher)

    @property
    def root(self) -> Path:
        return self.hooks.root

    def list_hooks(self) -> OperationResult[list[Hook]]:
        try:
            return OperationResult.success(self.hooks.list())
        except CaptainError as exc:
            return OperationResult.failure(exc.to_error())

    def read_hook(self, name: str) -> OperationResult[HookDetail]:
        try:
            stem = normalize_name(name)
            body = self.hooks.read(stem)
            config = self.configs.read(stem)
        except CaptainError as exc:
            logger.error("Could not read %s: %s", name, exc.message)
            return OperationResult.failure(exc.to_error())
        return OperationResult.success(HookDetail(name=stem, body=body, config=config))

    def create_hook(
        self, name: str, body: JsonValue, config: HookConfig | None = None,
    ) -> OperationResult[HookDetail]:
        try:
            stem = normalize_name(name)
            parsed = parse_body(body)
            if config is not None:
                # Validate the stored config before the body is written.
                self.configs.read(stem)
            self.hooks.create(stem, parsed)
            stored = self.configs.write(stem, config) if config is not None else None
        except CaptainError as exc:
            self._record(ActivityEventType.HOOK_CREATED, name, "create", "failure")
            return OperationResult.failure(exc.to_error())
        self._record(ActivityEventType.HOOK_CREATED, stem, "create", "success")
        if stored is not None:
            self._record(ActivityEventType.CONFIG_WRITTEN, stem, "create", "success")
        return OperationResult.success(HookDetail(name=stem, body=parsed, config=stored))

    def update_hook(
        self, name: str, body: JsonValue, config: HookConfig | None = None,
    ) -> OperationResult[HookDetail]:
        try:
            stem = normalize_name(name)
            partial = parse_body(body)
            if not self.hooks.exists(stem):
                raise HookNotFoundError(stem)
            stored = self.configs.read(stem)
            updated = self.hooks.update(stem, partial)
            if config is not None:
                stored = self.configs.write(stem, config) or stored
        except CaptainError as exc:
            self._record(ActivityEventType.HOOK_UPDATED, name, "update", "failure")
            return OperationResult.failure(exc.to_error())
        self._record(ActivityEventType.HOOK_UPDATED, stem, "update", "success")
        if config is not None and config.model_fields_set:
            self._record(ActivityEventType.CONFIG_WRITTEN, stem, "update", "success")
        return OperationResult.success(HookDetail(name=stem, body=updated, config=stored))

    async def dispatch(
        self, name: str, url: str | None = None,
    ) -> OperationResult[DeliveryOutcome]:
        outcome = await self.dispatcher.dispatch(name, url)
        self._record(
            ActivityEventType.DELIVERY,
            name,
            f"{outcome.method.value if outcome.method else '-'} {outcome.url or '-'}",
            "success" if outcome.ok else "failure",
            details={
                "status_code": outcome.status_code,
                "error": outcome.error.kind.value if outcome.error else None,
            },
        )
        if outcome.ok:
            return OperationResult.success(outcome)
        return OperationResult(ok=False, data=outcome, error=outcome.error)

    def open_storage_location(self, path: str = "") -> OperationResult[str]:
        """Reveal the storage root, or a path inside it, in the file manager."""
        root = self.root.resolve()
        target = (root / path).resolve()
        if target != root and root not in target.parents:
            return OperationResult.failure(
                InvalidInputError(f"{path} is outside the hooks directory").to_error(),
            )
        root.mkdir(parents=True, exist_ok=True)
        logger.info("Opening %s", target)
        self._launcher(str(target))
        return OperationResult.success(str(target))

    def seed_sample_hooks(self) -> OperationResult[list[str]]:
        """Write the bundled sample hooks, skipping names that already exist.

        Returns the names that were written.
        """
        written: list[str] = []
        try:
            for name, body in SAMPLE_HOOKS.items():
                if self.hooks.create_if_absent(name, body):
                    written.append(name)
                    self._record(ActivityEventType.HOOK_CREATED, name, "sample", "success")
        except CaptainError as exc:
            return OperationResult.failure(exc.to_error())
        logger.info("Seeded %d sample hooks into %s", len(written), self.root)
        return OperationResult.success(written)

    def _record(
        self,
        event_type: ActivityEventType,
        hook: str,
        action: str,
        result: str,
        details: dict[str, object] | None = None,
    ) -> None:
        if self._activity:
            self._activity.log(ActivityEvent(
                event_type=event_type,
                hook=hook,
                action=action,
                result=result,
                details=details,
            ))
