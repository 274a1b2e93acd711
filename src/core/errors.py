"""Errores del cliente AbuseIPDB.

Todos heredan de `AbuseIPDBError` para que el llamador pueda capturar
cualquier fallo del pipeline con un único `except`.
"""

from __future__ import annotations

from core.domain.models import ApiErrorItem


class AbuseIPDBError(Exception):
    """Base de todos los errores emitidos por el cliente."""


class ProtocolError(AbuseIPDBError):
    """La respuesta no tiene el content-type esperado (`application/json`)."""

    def __init__(self, message: str, *, media_type: str | None = None, preview: str | None = None) -> None:
        super().__init__(message)
        self.media_type = media_type
        self.preview = preview


class ApiError(AbuseIPDBError):
    """Error de la API tras agotar el pipeline.

    `errors` está vacío cuando el cuerpo no se pudo interpretar como
    `{errors: [...]}`. `retry_after_ms` solo se rellena en respuestas 429 que
    traen la cabecera `Retry-After`.
    """

    def __init__(
        self,
        message: str,
        errors: list[ApiErrorItem] | None = None,
        *,
        status_code: int | None = None,
        retry_after_ms: int | None = None,
    ) -> None:
        super().__init__(message)
        self.errors: list[ApiErrorItem] = list(errors or [])
        self.status_code = status_code
        self.retry_after_ms = retry_after_ms

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429


class DecodeError(AbuseIPDBError):
    """El cuerpo JSON no encaja con el esquema esperado (drift de versión)."""

    def __init__(self, message: str, *, target: str, preview: str | None = None) -> None:
        super().__init__(message)
        self.target = target
        self.preview = preview
