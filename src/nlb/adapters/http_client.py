"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts y headers para todas las operaciones del gateway.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from nlb.core.config import ClientSettings

JSON_CONTENT = "application/json"


def build_client(
    settings: ClientSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
    extra_headers: dict[str, str] | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` reutilizable (pool de conexiones compartido).

    No sigue redirecciones: un `Location` del API se interpreta como puntero al
    recurso de ingress, no como redirect.
    """

    settings = settings or ClientSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": JSON_CONTENT,
    }
    if extra_headers:
        headers.update(extra_headers)
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=False,
        headers=headers,
        transport=transport,
    )
