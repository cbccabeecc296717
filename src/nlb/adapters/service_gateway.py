"""Gateway de servicios del balanceador (httpx).

Cada operación es un único intercambio síncrono request/response (más el
posible GET al `Location` de ingress). Todas comparten `_exchange`, que arma
headers, traduce fallos de transporte y clasifica el status.

Por qué un cliente compartido:
- Reutiliza el pool de conexiones entre llamadas en lugar de abrir uno por
  operación.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Callable, Iterator, TypeVar
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from nlb.adapters.http_client import JSON_CONTENT, build_client
from nlb.core.config import ClientSettings
from nlb.core.domain.models import IngressAddress, Service, decode_service
from nlb.core.errors import DecodeError, TransportError, UnexpectedStatusError

logger = logging.getLogger(__name__)

SERVICES_PATH = "services"

_OK = frozenset({200})
_FOUND = frozenset({200, 404})
_SYNCED = frozenset({200, 201})
_DELETED = frozenset({204})

_INGRESS_LIST = TypeAdapter(list[IngressAddress])

T = TypeVar("T")


class ServiceGateway:
    """Cliente del recurso `services` del API de balanceadores.

    Si no se inyecta `client`, el gateway crea uno propio y lo cierra en
    `close()`; un cliente inyectado pertenece al llamador.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        *,
        client: httpx.Client | None = None,
        settings: ClientSettings | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._owns_client = client is None
        self._client = client or build_client(settings)

    def __enter__(self) -> "ServiceGateway":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    @property
    def services_url(self) -> str:
        return f"{self._base_url}/{SERVICES_PATH}"

    def service_url(self, name: str) -> str:
        if not name:
            raise ValueError("service name must not be empty")
        return f"{self.services_url}/{quote(name, safe='')}"

    def iter_services(self, *, timeout: float | None = None) -> Iterator[Service]:
        """Itera los servicios configurados, decodificando elemento a elemento.

        El request se emite en el primer `next()`. Un elemento inválido aborta la
        iteración con `DecodeError`.
        """

        operation = "list services"
        url = self.services_url
        response = self._exchange("GET", url, operation=operation, accepted=_OK, timeout=timeout)

        items = self._decode(json.loads, response.content, operation=operation, url=url)
        if items is None:
            return
        if not isinstance(items, list):
            raise DecodeError("expected a JSON array of services", operation=operation, url=url)

        for index, item in enumerate(items):
            try:
                yield Service.model_validate(item)
            except ValidationError as exc:
                raise DecodeError(
                    f"error decoding Service object #{index}: {exc}",
                    operation=operation,
                    url=url,
                ) from exc

    def list_services(self, *, timeout: float | None = None) -> list[Service]:
        return list(self.iter_services(timeout=timeout))

    def get_service(self, name: str, *, timeout: float | None = None) -> tuple[Service, bool]:
        operation = f"get service {name}"
        url = self.service_url(name)
        response = self._exchange(
            "GET",
            url,
            operation=operation,
            accepted=_FOUND,
            timeout=timeout,
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return Service(), False

        service = self._decode(decode_service, response.content, operation=operation, url=url)
        location = response.headers.get("Location")
        if location:
            service.ingress = self._fetch_ingress(response, location, operation, timeout)
        return service, True

    def sync_service(self, service: Service, *, timeout: float | None = None) -> list[IngressAddress]:
        name = service.metadata.name
        if not name:
            raise ValueError("service metadata.name is required to sync")

        operation = f"sync service {name}"
        url = self.service_url(name)
        response = self._exchange(
            "PUT",
            url,
            operation=operation,
            accepted=_SYNCED,
            content=service.to_json().encode("utf-8"),
            timeout=timeout,
        )

        location = response.headers.get("Location")
        if location:
            return self._fetch_ingress(response, location, operation, timeout)
        return self._decode(_decode_ingress, response.content, operation=operation, url=url)

    def delete_service(self, name: str, *, timeout: float | None = None) -> None:
        self._exchange(
            "DELETE",
            self.service_url(name),
            operation=f"delete service {name}",
            accepted=_DELETED,
            timeout=timeout,
        )

    def _fetch_ingress(
        self,
        response: httpx.Response,
        location: str,
        operation: str,
        timeout: float | None,
    ) -> list[IngressAddress]:
        """Sigue el `Location` de `response` (relativo a su URL) y decodifica el ingress."""

        operation = f"{operation}: get ingress"
        try:
            url = str(response.url.join(location))
        except httpx.InvalidURL as exc:
            raise DecodeError(
                f"invalid Location header {location!r}: {exc}",
                operation=operation,
                url=str(response.url),
            ) from exc

        ingress_response = self._exchange("GET", url, operation=operation, accepted=_OK, timeout=timeout)
        return self._decode(_decode_ingress, ingress_response.content, operation=operation, url=url)

    def _exchange(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        accepted: frozenset[int],
        content: bytes | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Envía el request y clasifica la respuesta contra `accepted`.

        El body se lee completo y la conexión vuelve al pool en todos los casos.
        """

        headers = {
            "Content-Type": JSON_CONTENT,
            "Authorization": f"Bearer {self._token}",
        }
        logger.debug("%s: %s %s", operation, method, url)
        try:
            response = self._client.request(
                method,
                url,
                content=content,
                headers=headers,
                timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(
                f"error connecting to API endpoint: {exc}",
                operation=operation,
                url=url,
            ) from exc

        logger.debug("%s: %s %s -> %s", operation, method, url, response.status_code)
        if response.status_code not in accepted:
            raise UnexpectedStatusError(
                response.status_code,
                response.reason_phrase,
                body=response.text.strip(),
                operation=operation,
                url=url,
            )
        return response

    @staticmethod
    def _decode(decoder: Callable[[bytes], T], content: bytes, *, operation: str, url: str) -> T:
        try:
            return decoder(content)
        except DecodeError as exc:
            raise DecodeError(str(exc), operation=operation, url=url) from exc
        except ValueError as exc:
            # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors.
            raise DecodeError(f"invalid JSON body: {exc}", operation=operation, url=url) from exc


def _decode_ingress(content: bytes) -> list[IngressAddress]:
    if content.strip() in (b"", b"null"):
        return []
    return _INGRESS_LIST.validate_json(content)


_default_client: httpx.Client | None = None
_default_lock = threading.Lock()


def default_client() -> httpx.Client:
    """Cliente compartido por las funciones de módulo (se crea bajo demanda)."""

    global _default_client
    with _default_lock:
        if _default_client is None or _default_client.is_closed:
            _default_client = build_client()
        return _default_client


def close_default_client() -> None:
    global _default_client
    with _default_lock:
        if _default_client is not None:
            _default_client.close()
            _default_client = None


def _gateway(base_url: str, token: str, client: httpx.Client | None) -> ServiceGateway:
    return ServiceGateway(base_url, token, client=client or default_client())


def iter_services(
    base_url: str,
    token: str,
    *,
    client: httpx.Client | None = None,
    timeout: float | None = None,
) -> Iterator[Service]:
    return _gateway(base_url, token, client).iter_services(timeout=timeout)


def list_services(
    base_url: str,
    token: str,
    *,
    client: httpx.Client | None = None,
    timeout: float | None = None,
) -> list[Service]:
    return _gateway(base_url, token, client).list_services(timeout=timeout)


def get_service(
    name: str,
    base_url: str,
    token: str,
    *,
    client: httpx.Client | None = None,
    timeout: float | None = None,
) -> tuple[Service, bool]:
    return _gateway(base_url, token, client).get_service(name, timeout=timeout)


def sync_service(
    service: Service,
    base_url: str,
    token: str,
    *,
    client: httpx.Client | None = None,
    timeout: float | None = None,
) -> list[IngressAddress]:
    return _gateway(base_url, token, client).sync_service(service, timeout=timeout)


def delete_service(
    name: str,
    base_url: str,
    token: str,
    *,
    client: httpx.Client | None = None,
    timeout: float | None = None,
) -> None:
    _gateway(base_url, token, client).delete_service(name, timeout=timeout)
