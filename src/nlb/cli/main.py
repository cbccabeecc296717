"""CLI `nlb` (Typer + Rich).

Por qué una CLI delgada:
- Toda la lógica vive en `nlb.adapters.service_gateway`; aquí solo se
  resuelven opciones, se imprime y se traduce el resultado a códigos de salida.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from nlb.adapters.json_exporter import export_services_json
from nlb.adapters.json_loader import load_service_file
from nlb.adapters.service_gateway import ServiceGateway
from nlb.cli import doctor
from nlb.cli.ui_components import build_ingress_table, build_service_panel, build_services_table
from nlb.core.config import ClientSettings
from nlb.core.errors import NLBError

app = typer.Typer(no_args_is_help=True, help="Manage load balancer services through the control-plane API.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)

EXIT_NOT_FOUND = 2


@dataclass
class CliState:
    settings: ClientSettings
    base_url: str
    token: str | None

    def gateway(self) -> ServiceGateway:
        if not self.token:
            _err_console.print("[red]Error:[/red] an API token is required (--token or NLB_TOKEN)")
            raise typer.Exit(code=1)
        return ServiceGateway(self.base_url, self.token, settings=self.settings)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_err_console, show_path=False)],
        force=True,
    )


def _fail(exc: NLBError) -> typer.Exit:
    _err_console.print(f"[red]Error:[/red] {exc}")
    return typer.Exit(code=1)


@app.callback()
def main(
    ctx: typer.Context,
    base_url: str | None = typer.Option(None, "--base-url", help="API base URL (default: NLB_BASE_URL)."),
    token: str | None = typer.Option(None, "--token", help="Bearer token (default: NLB_TOKEN)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log HTTP exchanges."),
) -> None:
    _configure_logging(verbose)
    settings = ClientSettings()
    ctx.obj = CliState(
        settings=settings,
        base_url=base_url or settings.base_url,
        token=token or settings.token,
    )


@app.command(name="list")
def list_cmd(
    ctx: typer.Context,
    json_path: Path | None = typer.Option(None, "--json", help="Also write the services to this JSON file."),
) -> None:
    """List the services configured on the load balancers."""

    state: CliState = ctx.obj
    try:
        with state.gateway() as gateway:
            services = gateway.list_services()
    except NLBError as exc:
        raise _fail(exc) from exc

    _console.print(build_services_table(services))
    if json_path is not None:
        export_services_json(services=services, output_path=json_path)
        _console.print(f"[green]Saved {len(services)} services to:[/green] {json_path}")


@app.command()
def get(ctx: typer.Context, name: str = typer.Argument(..., help="Service name.")) -> None:
    """Show a single service and its ingress addresses."""

    state: CliState = ctx.obj
    try:
        with state.gateway() as gateway:
            service, found = gateway.get_service(name)
    except NLBError as exc:
        raise _fail(exc) from exc

    if not found:
        _err_console.print(f"[yellow]Service not found:[/yellow] {name}")
        raise typer.Exit(code=EXIT_NOT_FOUND)

    _console.print(build_service_panel(service))
    if service.ingress:
        _console.print(build_ingress_table(service.ingress))


@app.command()
def sync(
    ctx: typer.Context,
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON file with the service envelope."),
) -> None:
    """Create or replace a service from a JSON definition."""

    state: CliState = ctx.obj
    try:
        service = load_service_file(path)
        with state.gateway() as gateway:
            ingress = gateway.sync_service(service)
    except NLBError as exc:
        raise _fail(exc) from exc

    _console.print(f"[green]Synced service:[/green] {service.name}")
    if ingress:
        _console.print(build_ingress_table(ingress))


@app.command()
def delete(ctx: typer.Context, name: str = typer.Argument(..., help="Service name.")) -> None:
    """Delete a service."""

    state: CliState = ctx.obj
    try:
        with state.gateway() as gateway:
            gateway.delete_service(name)
    except NLBError as exc:
        raise _fail(exc) from exc

    _console.print(f"[green]Deleted service:[/green] {name}")


def run() -> None:
    app()
