"""Shared test fixtures for captain-hooks."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from captain.audit.logger import ActivityLogger
from captain.dispatch.runner import HookDispatcher
from captain.service import HookService
from captain.store.config import ConfigStore
from captain.store.hooks import HookStore
from captain.templating.substitute import mapping_lookup


@pytest.fixture
def hooks_dir(tmp_path: Path) -> Path:
    path = tmp_path / "hooks"
    path.mkdir()
    return path


@pytest.fixture
def write_hook(hooks_dir: Path) -> Callable[..., Path]:
    """Write ``<name>.json`` (and optionally ``<name>.config.json``) directly."""

    def _write(name: str, body: Any, config: dict[str, Any] | None = None) -> Path:
        path = hooks_dir / f"{name}.json"
        path.write_text(json.dumps(body))
        if config is not None:
            (hooks_dir / f"{name}.config.json").write_text(json.dumps(config))
        return path

    return _write


@pytest.fixture
def hook_store(hooks_dir: Path) -> HookStore:
    return HookStore(hooks_dir)


@pytest.fixture
def config_store(hooks_dir: Path) -> ConfigStore:
    return ConfigStore(hooks_dir)


@pytest.fixture
def mock_activity_logger() -> MagicMock:
    return MagicMock(spec=ActivityLogger)


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it handled."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


def json_responder(payload: Any = None, status_code: int = 200) -> RecordingTransport:
    return RecordingTransport(lambda request: httpx.Response(status_code, json=payload))


def make_dispatcher(
    hooks_dir: Path,
    transport: httpx.AsyncBaseTransport | None = None,
    env: dict[str, str] | None = None,
    **kwargs: Any,
) -> HookDispatcher:
    """Factory for HookDispatcher over a storage root with a fixed environment."""
    return HookDispatcher(
        HookStore(hooks_dir),
        ConfigStore(hooks_dir),
        lookup=mapping_lookup(env or {}),
        transport=transport,
        **kwargs,
    )


def make_service(
    hooks_dir: Path,
    transport: httpx.AsyncBaseTransport | None = None,
    env: dict[str, str] | None = None,
    activity_logger: ActivityLogger | None = None,
    launcher: Callable[[str], Any] | None = None,
) -> HookService:
    """Factory for HookService with injectable transport, environment and launcher."""
    return HookService(
        HookStore(hooks_dir),
        ConfigStore(hooks_dir),
        make_dispatcher(hooks_dir, transport, env),
        activity_logger=activity_logger,
        launcher=launcher or MagicMock(),
    )
