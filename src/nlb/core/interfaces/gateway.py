"""Contrato del gateway de servicios.

Por qué Protocol:
- La CLI y los tests dependen del contrato, no de la implementación httpx.
- Permite sustituir el gateway por un doble en memoria.
"""

from __future__ import annotations

from typing import Iterator, Protocol, runtime_checkable

from nlb.core.domain.models import IngressAddress, Service


@runtime_checkable
class ServiceRegistry(Protocol):
    """CRUD de servicios contra el plano de control del balanceador."""

    def iter_services(self, *, timeout: float | None = None) -> Iterator[Service]:
        ...

    def list_services(self, *, timeout: float | None = None) -> list[Service]:
        ...

    def get_service(self, name: str, *, timeout: float | None = None) -> tuple[Service, bool]:
        """Devuelve `(servicio, encontrado)`; un 404 no es un error."""

        ...

    def sync_service(self, service: Service, *, timeout: float | None = None) -> list[IngressAddress]:
        """Crea o reemplaza el servicio (idempotente por nombre)."""

        ...

    def delete_service(self, name: str, *, timeout: float | None = None) -> None:
        ...
