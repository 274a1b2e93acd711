"""Pipeline de peticiones a la API.

Responsabilidad:
- Construir y enviar una petición (JSON, texto crudo o multipart).
- Reintentar solo ante errores 5xx, con espera fija entre intentos.
- Validar el content-type y traducir cualquier estado no aceptado en un
  único `ApiError`.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import IO, Any, Iterable, Mapping, Union

import httpx
from pydantic import BaseModel

from adapters.abuseipdb.decoding import decode, preview
from core.config import DEFAULT_BASE_URL
from core.domain.models import ErrorEnvelope
from core.errors import ApiError, DecodeError, ProtocolError

logger = logging.getLogger(__name__)

DEFAULT_ACCEPTABLE_STATUSES: frozenset[int] = frozenset({200})
MAX_RETRIES = 3
RETRY_DELAY_SECONDS = 3.0
JSON_MEDIA_TYPE = "application/json"


@dataclass(frozen=True)
class JsonBody:
    """Objeto serializable (dict o modelo Pydantic) enviado como JSON."""

    value: Any


@dataclass(frozen=True)
class RawStringBody:
    """Texto ya serializado, enviado tal cual como cuerpo completo."""

    text: str
    content_type: str = JSON_MEDIA_TYPE


@dataclass(frozen=True)
class StreamBody:
    """Datos binarios enviados como un único campo multipart."""

    stream: Union[IO[bytes], bytes]
    field_name: str
    file_name: str
    content_type: str = "text/csv"


RequestBody = Union[JsonBody, RawStringBody, StreamBody]


def _request_kwargs(body: RequestBody | None) -> dict[str, Any]:
    # Se resuelve una sola vez: los reintentos reenvían los mismos bytes.
    if body is None:
        return {}
    if isinstance(body, JsonBody):
        value = body.value
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json", by_alias=True, exclude_none=True)
        return {"json": value}
    if isinstance(body, RawStringBody):
        return {
            "content": body.text.encode("utf-8"),
            "headers": {"Content-Type": body.content_type},
        }
    if isinstance(body, StreamBody):
        data = body.stream if isinstance(body.stream, bytes) else body.stream.read()
        if isinstance(data, str):
            data = data.encode("utf-8")
        return {"files": {body.field_name: (body.file_name, data, body.content_type)}}
    raise TypeError(f"Unsupported request body: {type(body).__name__}")


def media_type(response: httpx.Response) -> str:
    header = response.headers.get("content-type", "")
    return header.split(";", 1)[0].strip().lower()


def ensure_json(response: httpx.Response) -> None:
    """Lanza `ProtocolError` si la respuesta no es `application/json`.

    Solo los cuerpos `text/*` se previsualizan en el mensaje.
    """

    received = media_type(response)
    if received == JSON_MEDIA_TYPE:
        return

    body_preview = preview(response) if received.startswith("text/") else None
    message = f"Expected response to be JSON, but received '{received or 'no content type'}'"
    if body_preview is not None:
        message += f"\nPreview: {body_preview}"
    raise ProtocolError(message, media_type=received or None, preview=body_preview)


def parse_retry_after(response: httpx.Response) -> int | None:
    """`Retry-After` en milisegundos (acepta segundos o fecha HTTP)."""

    value = response.headers.get("retry-after")
    if value is None:
        return None
    value = value.strip()
    if value.isdigit():
        return int(value) * 1000

    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    delta = (when - datetime.now(timezone.utc)).total_seconds()
    return max(0, int(delta * 1000))


def build_api_error(
    response: httpx.Response,
    *,
    method: str,
    path: str,
    acceptable: Iterable[int],
) -> ApiError:
    status = response.status_code
    try:
        envelope: ErrorEnvelope | None = decode(response, ErrorEnvelope)
    except DecodeError:
        envelope = None

    if envelope is None or not envelope.errors:
        expected = ", ".join(str(code) for code in sorted(acceptable))
        return ApiError(
            f"Failed to request {method} {path}, expected status code {expected} but received {status}.",
            status_code=status,
        )

    errors = [item.model_copy(update={"index": i}) for i, item in enumerate(envelope.errors)]
    suffix = "" if len(errors) == 1 else "s"
    lines = [f"Failed to request {method} {path}, received {len(errors)} API error{suffix}."]
    for error in errors:
        line = f"[#{error.index + 1}] (status code: {error.status}) {error.detail}"
        if error.parameter:
            line += f", source parameter: {error.parameter}"
        lines.append(line)

    retry_after_ms = parse_retry_after(response) if status == 429 else None
    return ApiError(
        "\n".join(lines),
        errors,
        status_code=status,
        retry_after_ms=retry_after_ms,
    )


async def execute(
    client: httpx.AsyncClient,
    method: str,
    path: str,
    *,
    body: RequestBody | None = None,
    params: Mapping[str, Any] | None = None,
    acceptable: Iterable[int] = DEFAULT_ACCEPTABLE_STATUSES,
    absolute_url: bool = False,
    base_url: str = DEFAULT_BASE_URL,
    max_retries: int = MAX_RETRIES,
    retry_delay_seconds: float = RETRY_DELAY_SECONDS,
) -> httpx.Response:
    """Ejecuta una operación lógica contra la API.

    - `path` se concatena a `base_url` salvo que `absolute_url` sea True
      (mirrors/proxies compatibles); en ese caso no se valida el content-type.
    - Devuelve la respuesta cuyo estado está en `acceptable`.
    - Lanza `ProtocolError` o `ApiError`; nunca devuelve una respuesta fallida.
    """

    method = method.upper()
    acceptable = frozenset(acceptable)
    url = path if absolute_url else f"{base_url}{path}"
    kwargs = _request_kwargs(body)

    attempt = 0
    while True:
        logger.debug("%s %s (attempt %d/%d)", method, url, attempt + 1, max_retries + 1)
        response = await client.request(method, url, params=params, **kwargs)

        if not absolute_url:
            ensure_json(response)

        if response.status_code in acceptable:
            return response

        if response.status_code < 500 or attempt >= max_retries:
            break

        attempt += 1
        logger.warning(
            "%s %s returned %d, retrying in %.1fs (%d/%d)",
            method,
            path,
            response.status_code,
            retry_delay_seconds,
            attempt,
            max_retries,
        )
        await asyncio.sleep(retry_delay_seconds)

    raise build_api_error(response, method=method, path=path, acceptable=acceptable)
