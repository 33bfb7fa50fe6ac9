"""Tests for the captain CLI."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import httpx
from click.testing import CliRunner

from captain.cli import cli
from tests.conftest import json_responder, make_service


def _invoke(hooks_dir: Path, *args: str, service=None):
    runner = CliRunner()
    obj = {"service": service} if service is not None else None
    return runner.invoke(cli, ["--hooks-dir", str(hooks_dir), *args], obj=obj)


def test_create_and_show(hooks_dir: Path) -> None:
    result = _invoke(hooks_dir, "create", "ping", '{"hello": "world"}')
    assert result.exit_code == 0
    assert json.loads(result.output)["ok"] is True

    result = _invoke(hooks_dir, "show", "ping")
    assert result.exit_code == 0
    data = json.loads(result.output)["data"]
    assert data["body"] == {"hello": "world"}
    assert data["config"] is None


def test_create_with_config_options(hooks_dir: Path) -> None:
    result = _invoke(
        hooks_dir, "create", "ping", "{}",
        "--url", "http://x", "--method", "get",
        "--header", "X-Token={{TOKEN}}", "--query", "a=1",
    )
    assert result.exit_code == 0
    raw = json.loads((hooks_dir / "ping.config.json").read_text())
    assert raw == {
        "url": "http://x", "method": "GET", "query": {"a": "1"}, "headers": {"X-Token": "{{TOKEN}}"},
    }


def test_bad_header_pair_rejected(hooks_dir: Path) -> None:
    result = _invoke(hooks_dir, "create", "ping", "{}", "--header", "no-equals")
    assert result.exit_code != 0


def test_update_merges(hooks_dir: Path, write_hook) -> None:
    write_hook("h", {"a": 1, "b": 2})
    result = _invoke(hooks_dir, "update", "h", '{"b": 3, "c": 4}')
    assert result.exit_code == 0
    assert json.loads((hooks_dir / "h.json").read_text()) == {"a": 1, "b": 3, "c": 4}


def test_list_excludes_configs(hooks_dir: Path, write_hook) -> None:
    write_hook("webhook1", {"a": 1}, config={"url": "http://x"})
    result = _invoke(hooks_dir, "list")
    assert result.exit_code == 0
    assert [h["name"] for h in json.loads(result.output)["data"]] == ["webhook1"]


def test_show_missing_exits_nonzero(hooks_dir: Path) -> None:
    result = _invoke(hooks_dir, "show", "ghost")
    assert result.exit_code == 1
    assert "not_found" in result.output


def test_run_uses_service(hooks_dir: Path, write_hook) -> None:
    write_hook("h", {"a": 1})
    transport = json_responder({"ok": True})
    service = make_service(hooks_dir, transport)
    result = _invoke(hooks_dir, "run", "h", "--url", "http://target/", service=service)
    assert result.exit_code == 0
    assert json.loads(transport.requests[0].content) == {"a": 1}


def test_run_connection_refused(hooks_dir: Path, write_hook) -> None:
    write_hook("h", {"a": 1})

    def _refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

    service = make_service(hooks_dir, httpx.MockTransport(_refuse))
    result = _invoke(hooks_dir, "run", "h", "--url", "http://localhost:9/", service=service)
    assert result.exit_code == 1
    assert "Connection refused. Is the server running?" in result.output


def test_open_calls_launcher(hooks_dir: Path) -> None:
    launcher = MagicMock()
    service = make_service(hooks_dir, launcher=launcher)
    result = _invoke(hooks_dir, "open", service=service)
    assert result.exit_code == 0
    launcher.assert_called_once()


def test_samples_seeds_hooks(hooks_dir: Path, write_hook) -> None:
    write_hook("github-push", {"mine": True})
    result = _invoke(hooks_dir, "samples")
    assert result.exit_code == 0
    written = json.loads(result.output)["data"]
    assert written
    assert "github-push" not in written
    assert json.loads((hooks_dir / "github-push.json").read_text()) == {"mine": True}
