"""Exportación JSON de servicios.

Por qué JSON:
- El mismo formato que acepta el API: un volcado puede reenviarse con `nlb sync`.
- Permite versionar la configuración del balanceador fuera del plano de control.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable

from nlb.core.domain.models import Service


def export_services_json(*, services: Iterable[Service], output_path: Path) -> Path:
    """Exporta servicios a JSON UTF-8 con formato estable (campos vacíos omitidos)."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = [service.to_wire() for service in services]
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
