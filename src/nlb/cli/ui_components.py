"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

import json
from typing import Iterable

from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from nlb.core.domain.models import FrontendConfig, IngressAddress, Service, TCPConfig
from nlb.core.errors import DecodeError


def describe_config(service: Service) -> str:
    """Resumen de una línea del `config` según su tipo."""

    try:
        config = service.decode_config()
    except DecodeError as exc:
        return f"[invalid: {exc}]"

    if isinstance(config, TCPConfig):
        ports = ",".join(str(p) for p in config.ports) or "-"
        parts = [f"{config.method or 'default'} ports={ports}", f"backends={len(config.backends)}"]
        if config.frontend:
            parts.append(f"frontend={config.frontend}")
        return " ".join(parts)
    if isinstance(config, FrontendConfig):
        return ", ".join(str(a) for a in config.addresses) or "-"
    return service.type


def build_services_table(services: Iterable[Service]) -> Table:
    table = Table(title="Services")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Type", style="white")
    table.add_column("Config", style="magenta")
    table.add_column("Updated", style="dim")
    for service in services:
        updated = service.metadata.updated_at.isoformat() if service.metadata.updated_at else "-"
        table.add_row(service.name, service.type, describe_config(service), updated)
    return table


def build_ingress_table(ingress: Iterable[IngressAddress]) -> Table:
    table = Table(title="Ingress")
    table.add_column("IP", style="green")
    table.add_column("Hostname", style="white")
    table.add_column("Ports", style="dim")
    for item in ingress:
        ports = ", ".join(f"{p.port}/{p.protocol}" for p in item.ports) or "-"
        table.add_row(str(item.ip) if item.ip else "-", item.hostname or "-", ports)
    return table


def build_service_panel(service: Service) -> Panel:
    """Panel con el envelope completo del servicio (sin ingress)."""

    payload = service.model_copy(update={"ingress": []}).to_wire()
    body = Syntax(json.dumps(payload, indent=2, ensure_ascii=False), "json", word_wrap=True)
    title = Text(f"{service.name} ({service.type})", style="bold cyan")
    return Panel(body, title=title, border_style="cyan")
