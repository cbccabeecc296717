"""Doctor command for environment diagnostics."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from nlb.adapters.service_gateway import ServiceGateway
from nlb.core.config import ClientSettings, write_user_env_vars
from nlb.core.errors import NLBError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_api(settings: ClientSettings, base_url: str, token: str) -> tuple[bool, str]:
    try:
        with ServiceGateway(base_url, token, settings=settings) as gateway:
            services = gateway.list_services()
    except NLBError as exc:
        return False, str(exc)
    return True, f"{len(services)} services"


@app.command()
def run(ctx: typer.Context) -> None:
    """Run baseline diagnostics against the configured API."""

    state = ctx.obj
    settings: ClientSettings = state.settings if state is not None else ClientSettings()
    base_url = state.base_url if state is not None else settings.base_url
    token = state.token if state is not None else settings.token

    table = Table(title="NLB Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row("Base URL", "OK", base_url)
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:g}s")

    if token:
        table.add_row("Token", "OK", "Bearer token configured")
        ok_api, detail_api = _check_api(settings, base_url, token)
        table.add_row("API", "OK" if ok_api else "FAIL", detail_api)
    else:
        ok_api = False
        table.add_row("Token", "MISSING", "Set NLB_TOKEN or run `nlb doctor setup`")
        table.add_row("API", "SKIPPED", "No token")

    _console.print(table)
    if not ok_api:
        raise typer.Exit(code=1)


@app.command()
def setup() -> None:
    """Interactive setup (stores config in the user config .env)."""

    settings = ClientSettings()
    base_url = typer.prompt("API base URL", default=settings.base_url, show_default=True).strip()
    token = typer.prompt("API token", hide_input=True, confirmation_prompt=False).strip()

    if not base_url or not token:
        raise typer.BadParameter("base_url and token are required")

    env_path = write_user_env_vars({"NLB_BASE_URL": base_url, "NLB_TOKEN": token})
    _console.print(f"[green]Saved API config to:[/green] {env_path}")
