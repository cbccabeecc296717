"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Validación estricta de IPs, redes y puertos en el borde, sin código manual.
- Serialización estable hacia el API del balanceador (omitiendo campos vacíos).

Nota:
- `Message.config` viaja sin decodificar. Solo cuando el `type` es conocido se
  resuelve al modelo concreto (`decode_config`).
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Annotated, Any, cast

from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    IPvAnyAddress,
    IPvAnyNetwork,
    SerializerFunctionWrapHandler,
    ValidationError,
    field_validator,
    model_serializer,
)
from pydantic.config import ConfigDict

from nlb.core.errors import DecodeError, UnsupportedTypeError

FRONTEND = "frontend"
TCP = "tcp"
SHARED_HTTP = "shared_http"

Port = Annotated[int, Field(ge=0, le=65535)]


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    if isinstance(value, (int, float)):
        return value == 0
    return False


class WireModel(BaseModel):
    """Base de todos los DTOs del API.

    Los campos vacíos (None, "", 0, False, [], {}) se omiten al serializar y su
    ausencia se decodifica al valor cero.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_serializer(mode="wrap")
    def omit_empty_fields(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        return {key: value for key, value in data.items() if not _is_empty(value)}

    def to_wire(self) -> dict[str, Any]:
        """Payload JSON-compatible listo para enviar."""

        return self.model_dump(mode="json")

    def to_json(self) -> str:
        return json.dumps(self.to_wire(), ensure_ascii=False, separators=(",", ":"))


class Metadata(WireModel):
    """Metadatos comunes de cualquier objeto del balanceador."""

    name: str = Field(
        default="",
        description="Nombre único del objeto; también es su segmento en la URL.",
    )
    created_at: datetime | None = Field(
        default=None,
        description="Momento de creación (lo asigna el servidor).",
    )
    updated_at: datetime | None = Field(
        default=None,
        description="Momento de la última actualización (lo asigna el servidor).",
    )

    @field_validator("created_at", "updated_at", mode="after")
    @classmethod
    def zero_time_is_unset(cls, value: datetime | None) -> datetime | None:
        # The API emits 0001-01-01T00:00:00Z for timestamps it never set.
        if value is not None and value.year == 1:
            return None
        return value


class FrontendConfig(WireModel):
    """Conjunto de IPs expuestas públicamente por el balanceador."""

    addresses: list[IPvAnyAddress] = Field(default_factory=list)


class Backend(WireModel):
    addrs: list[IPvAnyAddress] = Field(
        default_factory=list,
        validation_alias=AliasChoices("addrs", "Addrs"),
    )


class HealthCheck(WireModel):
    port: Port = 0
    send: str = ""
    expect: str = Field(default="", description="Patrón esperado en la respuesta.")


class TCPConfig(WireModel):
    """Configuración de un servicio TCP balanceado.

    `frontend` referencia por nombre a un `Frontend`; esta capa no lo verifica.
    """

    method: str = Field(default="", description="Algoritmo de balanceo (p.ej. 'least_conn').")
    ports: list[Port] = Field(default_factory=list)
    backends: dict[str, Backend] = Field(
        default_factory=dict,
        description="Backends indexados por hostname.",
    )
    upstream_max_conns: int = 0
    acl: list[IPvAnyNetwork] = Field(
        default_factory=list,
        description="Redes de origen autorizadas.",
    )
    health_check: HealthCheck = Field(default_factory=HealthCheck)
    frontend: str = ""


class SharedHTTPConfig(WireModel):
    """Servicio HTTP compartido (modelo parcial).

    Incompleto a propósito: `http` y `https` se conservan como JSON crudo hasta
    que el API estabilice su esquema.
    """

    names: list[str] = Field(default_factory=list)
    sticky_backends: bool = False
    backend_protocols: str = ""
    http: Any = None
    https: Any = None
    backends: list[Backend] = Field(default_factory=list)


CONFIG_TYPES: dict[str, type[WireModel]] = {
    FRONTEND: FrontendConfig,
    TCP: TCPConfig,
    SHARED_HTTP: SharedHTTPConfig,
}


def register_config_type(tag: str, model: type[WireModel]) -> None:
    """Asocia un `type` del envelope a su modelo de configuración."""

    if not tag:
        raise ValueError("config type tag must not be empty")
    CONFIG_TYPES[tag] = model


def config_type_for(tag: str) -> type[WireModel]:
    try:
        return CONFIG_TYPES[tag]
    except KeyError:
        raise UnsupportedTypeError(tag) from None


def tag_for_config(config: WireModel) -> str:
    for tag, model in CONFIG_TYPES.items():
        if type(config) is model:
            return tag
    raise UnsupportedTypeError(type(config).__name__)


class Message(WireModel):
    """Envelope `{type, metadata, config}` intercambiado con el API.

    Decodificación en dos fases:
    1. `decode_message` valida el envelope y deja `config` como JSON crudo.
    2. `decode_config` elige el modelo según `type` y valida `config`.
    """

    type: str = ""
    metadata: Metadata = Field(default_factory=Metadata)
    config: Any = Field(
        default=None,
        description="Configuración sin decodificar; su forma depende de `type`.",
    )

    @property
    def name(self) -> str:
        return self.metadata.name

    @classmethod
    def from_config(cls, config: WireModel, *, metadata: Metadata | None = None, **extra: Any):
        """Construye el envelope a partir de una configuración tipada."""

        return cls(
            type=tag_for_config(config),
            metadata=metadata or Metadata(),
            config=config.to_wire(),
            **extra,
        )

    def decode_config(self) -> WireModel:
        """Segunda fase: resuelve `config` según `type`.

        Lanza `UnsupportedTypeError` si el tag no está registrado y `DecodeError`
        si el payload no encaja en el modelo.
        """

        model = config_type_for(self.type)
        raw = self.config if self.config is not None else {}
        try:
            return model.model_validate(raw)
        except ValidationError as exc:
            raise DecodeError(f"invalid {self.type!r} config: {exc}") from exc


class PortStatus(WireModel):
    port: int = 0
    protocol: str = ""
    error: str | None = None


class IngressAddress(WireModel):
    """Dirección externa asignada a un servicio (formato LoadBalancerIngress)."""

    ip: IPvAnyAddress | None = None
    hostname: str = ""
    ports: list[PortStatus] = Field(default_factory=list)


class Service(Message):
    """Servicio gestionado por el balanceador.

    `ingress` solo se rellena tras un get/sync exitoso.
    """

    ingress: list[IngressAddress] = Field(default_factory=list)


def decode_message(data: bytes | str, model: type[Message] = Message) -> Message:
    """Primera fase: valida el envelope sin tocar `config`."""

    try:
        return model.model_validate_json(data)
    except ValidationError as exc:
        raise DecodeError(f"error decoding {model.__name__} object: {exc}") from exc


def decode_service(data: bytes | str) -> Service:
    return cast(Service, decode_message(data, Service))
