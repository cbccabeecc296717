"""Cliente del API de gestión de balanceadores de carga."""

from nlb.adapters.service_gateway import (
    ServiceGateway,
    delete_service,
    get_service,
    iter_services,
    list_services,
    sync_service,
)
from nlb.core.domain.models import (
    Backend,
    FrontendConfig,
    HealthCheck,
    IngressAddress,
    Message,
    Metadata,
    Service,
    SharedHTTPConfig,
    TCPConfig,
    decode_message,
)
from nlb.core.errors import (
    DecodeError,
    NLBError,
    TransportError,
    UnexpectedStatusError,
    UnsupportedTypeError,
)

__all__ = [
    "Backend",
    "DecodeError",
    "FrontendConfig",
    "HealthCheck",
    "IngressAddress",
    "Message",
    "Metadata",
    "NLBError",
    "Service",
    "ServiceGateway",
    "SharedHTTPConfig",
    "TCPConfig",
    "TransportError",
    "UnexpectedStatusError",
    "UnsupportedTypeError",
    "decode_message",
    "delete_service",
    "get_service",
    "iter_services",
    "list_services",
    "sync_service",
]
