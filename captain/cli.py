"""Click CLI for storing, inspecting and replaying hooks."""

from __future__ import annotations

import asyncio
import logging

import click

from captain.config import DEFAULT_HOOKS_DIR, DEFAULT_PORT, Settings
from captain.models import HookConfig, HttpMethod, OperationResult
from captain.service import HookService


def _parse_pairs(pairs: tuple[str, ...], option: str) -> dict[str, str]:
    result: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint=option)
        result[key] = value
    return result


def _build_config(
    url: str | None,
    method: str | None,
    query: tuple[str, ...],
    header: tuple[str, ...],
) -> HookConfig | None:
    fields: dict[str, object] = {}
    if url is not None:
        fields["url"] = url
    if method is not None:
        fields["method"] = HttpMethod(method.upper())
    if query:
        fields["query"] = _parse_pairs(query, "--query")
    if header:
        fields["headers"] = _parse_pairs(header, "--header")
    return HookConfig(**fields) if fields else None


def _emit(result: OperationResult) -> None:
    click.echo(result.model_dump_json(indent=2))
    if not result.ok:
        raise SystemExit(1)


def config_options(func):
    """Shared ``--url/--method/--query/--header`` options for create and update."""
    func = click.option(
        "--header", multiple=True, metavar="KEY=VALUE",
        help="Request header; values may use {{ ENV_VAR }} placeholders.",
    )(func)
    func = click.option("--query", multiple=True, metavar="KEY=VALUE", help="Query parameter.")(func)
    func = click.option(
        "--method", type=click.Choice([m.value for m in HttpMethod], case_sensitive=False),
        default=None, help="HTTP method (default POST).",
    )(func)
    func = click.option("--url", default=None, help="Delivery URL stored in the hook config.")(func)
    return func


@click.group()
@click.option(
    "--hooks-dir", envvar="CAPTAIN_HOOKS_DIR", default=DEFAULT_HOOKS_DIR,
    show_default=True, help="Directory holding <name>.json hook files.",
)
@click.option(
    "--timeout", envvar="CAPTAIN_TIMEOUT", type=float, default=30.0,
    show_default=True, help="Outbound request timeout in seconds.",
)
@click.option(
    "--activity-log", envvar="CAPTAIN_ACTIVITY_LOG", default=None,
    help="Activity log file path (JSON Lines).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log at INFO level.")
@click.pass_context
def cli(
    ctx: click.Context,
    hooks_dir: str,
    timeout: float,
    activity_log: str | None,
    verbose: bool,
) -> None:
    """Store webhook payloads as JSON and replay them on demand."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    settings = Settings(hooks_dir=hooks_dir, timeout=timeout, activity_log=activity_log)
    ctx.obj["settings"] = settings
    if "service" not in ctx.obj:
        ctx.obj["service"] = HookService.from_settings(settings)


@cli.command("list")
@click.pass_context
def list_hooks(ctx: click.Context) -> None:
    """List stored hooks with their bodies."""
    service: HookService = ctx.obj["service"]
    _emit(service.list_hooks())


@cli.command()
@click.argument("name")
@click.pass_context
def show(ctx: click.Context, name: str) -> None:
    """Show a hook's body and config."""
    service: HookService = ctx.obj["service"]
    _emit(service.read_hook(name))


@cli.command()
@click.argument("name")
@click.argument("body")
@config_options
@click.pass_context
def create(
    ctx: click.Context,
    name: str,
    body: str,
    url: str | None,
    method: str | None,
    query: tuple[str, ...],
    header: tuple[str, ...],
) -> None:
    """Create (or overwrite) hook NAME with JSON BODY."""
    service: HookService = ctx.obj["service"]
    _emit(service.create_hook(name, body, _build_config(url, method, query, header)))


@cli.command()
@click.argument("name")
@click.argument("body", default="{}")
@config_options
@click.pass_context
def update(
    ctx: click.Context,
    name: str,
    body: str,
    url: str | None,
    method: str | None,
    query: tuple[str, ...],
    header: tuple[str, ...],
) -> None:
    """Merge JSON BODY into hook NAME and update its config."""
    service: HookService = ctx.obj["service"]
    _emit(service.update_hook(name, body, _build_config(url, method, query, header)))


@cli.command()
@click.argument("name")
@click.option("--url", default=None, help="Target URL when the hook config has none.")
@click.pass_context
def run(ctx: click.Context, name: str, url: str | None) -> None:
    """Send hook NAME to its configured URL (or --url)."""
    service: HookService = ctx.obj["service"]
    result = asyncio.run(service.dispatch(name, url))
    if not result.ok and result.error is not None:
        click.echo(f"[ERROR] {result.error.message}", err=True)
    _emit(result)


@cli.command("open")
@click.argument("path", default="")
@click.pass_context
def open_location(ctx: click.Context, path: str) -> None:
    """Reveal the hooks directory (or PATH inside it) in the file manager."""
    service: HookService = ctx.obj["service"]
    _emit(service.open_storage_location(path))


@cli.command()
@click.pass_context
def samples(ctx: click.Context) -> None:
    """Add the bundled sample hooks; existing hooks are left alone."""
    service: HookService = ctx.obj["service"]
    _emit(service.seed_sample_hooks())


@cli.command()
@click.option("--host", envvar="CAPTAIN_HOST", default="127.0.0.1", show_default=True)
@click.option("--port", envvar="CAPTAIN_PORT", type=int, default=DEFAULT_PORT, show_default=True)
@click.pass_context
def serve(ctx: click.Context, host: str, port: int) -> None:
    """Serve the hook API over HTTP."""
    import uvicorn

    from captain.server.app import create_app

    service: HookService = ctx.obj["service"]
    app = create_app(service)
    click.echo(f"Server listening at http://{host}:{port}", err=True)
    uvicorn.run(app, host=host, port=port)
