"""Carga de definiciones de servicio desde disco.

Soporta un único envelope `{type, metadata, config}` por archivo, el mismo
formato que produce `export_services_json` para cada elemento.
"""

from __future__ import annotations

from pathlib import Path

from nlb.core.domain.models import Service, decode_service


def load_service_file(path: Path) -> Service:
    """Lee y valida un servicio; el `config` se verifica contra su `type`."""

    service = decode_service(path.read_bytes())
    service.decode_config()
    return service
