"""Errores del cliente NLB.

Por qué una jerarquía propia:
- El llamador distingue fallos de transporte, estados HTTP inesperados y
  payloads inválidos sin inspeccionar excepciones de httpx o pydantic.
- Cada error lleva la operación y la URL para diagnosticar sin logs extra.
"""

from __future__ import annotations


class NLBError(RuntimeError):
    """Base de todos los errores del cliente."""

    def __init__(self, message: str, *, operation: str | None = None, url: str | None = None) -> None:
        self.operation = operation
        self.url = url
        prefix = ""
        if operation:
            prefix = f"{operation}: "
        suffix = f" ({url})" if url else ""
        super().__init__(f"{prefix}{message}{suffix}")


class TransportError(NLBError):
    """The HTTP exchange could not be completed (DNS, connection, TLS, timeout)."""


class UnexpectedStatusError(NLBError):
    """The API answered with a status outside the accepted set."""

    def __init__(
        self,
        status_code: int,
        reason: str,
        *,
        body: str = "",
        operation: str | None = None,
        url: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.reason = reason
        self.body = body
        message = f"API endpoint returned status {self.status}"
        if body:
            message = f"{message}, {body}"
        super().__init__(message, operation=operation, url=url)

    @property
    def status(self) -> str:
        return f"{self.status_code} {self.reason}".strip()


class DecodeError(NLBError):
    """Body was not valid JSON or did not match the expected schema."""


class UnsupportedTypeError(DecodeError):
    """Envelope `type` tag has no registered config model."""

    def __init__(self, tag: str, *, operation: str | None = None, url: str | None = None) -> None:
        self.tag = tag
        super().__init__(f"unsupported config type: {tag!r}", operation=operation, url=url)
