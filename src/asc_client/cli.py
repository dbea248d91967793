"""CLI for the App Store Connect client.

Commands:
- token: Mint (or reuse) a bearer token and report its expiry
- get: GET a single resource and print the JSON:API envelope
- list: GET every page of a list endpoint and print the collected items
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Annotated, Protocol

import typer
from rich import print as rprint
from rich.console import Console
from rich.markup import escape

from .application.client import AppStoreConnectClient
from .config import ClientConfig
from .config_file import load_client_config_file
from .exceptions import AscClientError
from .observability import set_log_level
from .protocols import TokenProvider


class DependenciesBuilder(Protocol):
    """Protocol for constructing CLI dependencies."""

    def __call__(self, *, config: ClientConfig) -> CliDependencies:
        """Build dependencies for CLI commands."""
        ...


@dataclass(frozen=True)
class CliDependencies:
    """Concrete dependencies required by the CLI."""

    client: AppStoreConnectClient
    tokens: TokenProvider


@dataclass(frozen=True)
class CliContext:
    """Runtime CLI context for a single command invocation."""

    config: ClientConfig
    deps_builder: DependenciesBuilder

    def build_dependencies(self, *, config: ClientConfig | None = None) -> CliDependencies:
        """Return dependencies using the configured builder."""
        return self.deps_builder(config=config or self.config)


class CliContextNotInitialisedError(typer.BadParameter):
    """Raised when CLI context is missing."""

    def __init__(self) -> None:
        super().__init__("CLI context is not initialised. Use the asc entry point.")


class QueryParameterFormatError(typer.BadParameter):
    """Raised when a --query value is not key=value."""

    def __init__(self, raw: str) -> None:
        super().__init__(f"Query parameters must look like key=value (got {raw!r}).")


def _get_context(ctx: typer.Context) -> CliContext:
    if not isinstance(ctx.obj, CliContext):
        raise CliContextNotInitialisedError()
    return ctx.obj


def _parse_query(raw_items: list[str] | None) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for raw in raw_items or []:
        key, separator, value = raw.partition("=")
        if not separator or not key:
            raise QueryParameterFormatError(raw)
        pairs.append((key, value))
    return pairs


def _fail(error: AscClientError) -> typer.Exit:
    rprint(f"[red]✗ {error.kind}:[/red] {escape(str(error))}")
    return typer.Exit(code=1)


def create_app(deps_builder: DependenciesBuilder) -> typer.Typer:
    """Create a Typer app wired with the provided dependencies builder."""
    app = typer.Typer(add_completion=False, help="App Store Connect API client")
    console = Console()
    status_console = Console(stderr=True)

    @app.callback()
    def main(
        ctx: typer.Context,
        config_path: Annotated[
            Path | None,
            typer.Option("--config", "-c", help="TOML config file overriding env values"),
        ] = None,
        verbose: Annotated[
            bool,
            typer.Option("--verbose", "-v", help="Log request and token activity at DEBUG"),
        ] = False,
    ) -> None:
        """Initialise CLI context."""
        if verbose:
            set_log_level(logging.DEBUG)
        try:
            config = ClientConfig.from_env()
            if config_path is not None:
                config = config.with_file_overrides(load_client_config_file(config_path))
        except AscClientError as exc:
            raise _fail(exc) from exc
        ctx.obj = CliContext(config=config, deps_builder=deps_builder)

    @app.command()
    def token(
        ctx: typer.Context,
        show: Annotated[
            bool,
            typer.Option("--show", help="Print the token itself (treat it as a secret)"),
        ] = False,
    ) -> None:
        """Mint a bearer token and report when it expires."""
        state = _get_context(ctx)
        try:
            deps = state.build_dependencies()
            value = deps.tokens.get_token()
        except AscClientError as exc:
            raise _fail(exc) from exc

        expires_at = deps.tokens.expires_at()
        rprint("[green]✓ Token ready[/green]")
        if expires_at is not None:
            expiry = datetime.fromtimestamp(expires_at, tz=UTC)
            rprint(f"  Expires: {expiry.isoformat()}")
        if show:
            typer.echo(value)

    @app.command()
    def get(
        ctx: typer.Context,
        path: Annotated[str, typer.Argument(help="Resource path, e.g. /v1/apps/123")],
        query: Annotated[
            list[str] | None,
            typer.Option("--query", "-q", help="Query parameter as key=value (repeatable)"),
        ] = None,
    ) -> None:
        """GET a single resource."""
        state = _get_context(ctx)
        pairs = _parse_query(query)
        try:
            deps = state.build_dependencies()
            envelope = deps.client.get(path, pairs)
        except AscClientError as exc:
            raise _fail(exc) from exc
        console.print_json(envelope.model_dump_json(by_alias=True, exclude_none=True))

    @app.command(name="list")
    def list_command(
        ctx: typer.Context,
        path: Annotated[str, typer.Argument(help="Collection path, e.g. /v1/apps")],
        query: Annotated[
            list[str] | None,
            typer.Option("--query", "-q", help="Query parameter as key=value (repeatable)"),
        ] = None,
        max_pages: Annotated[
            int | None,
            typer.Option("--max-pages", min=1, help="Stop after this many pages"),
        ] = None,
    ) -> None:
        """GET every page of a list endpoint."""
        state = _get_context(ctx)
        pairs = _parse_query(query)
        config = state.config.with_overrides(max_pages=max_pages)
        try:
            deps = state.build_dependencies(config=config)
            items = deps.client.get_all_pages(path, pairs)
        except AscClientError as exc:
            raise _fail(exc) from exc
        console.print_json(json.dumps(items))
        status_console.print(f"[green]✓ {len(items)} items[/green]")

    return app
