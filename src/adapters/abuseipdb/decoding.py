"""Decodificación JSON de respuestas.

Un fallo aquí no es un error de la API: significa que el cuerpo recibido no
encaja con el esquema que espera el cliente (p.ej. drift de versión).
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from core.domain.models import DataEnvelope
from core.errors import DecodeError

PREVIEW_MAX_LENGTH = 500

M = TypeVar("M")


def preview(response: httpx.Response, max_chars: int = PREVIEW_MAX_LENGTH) -> str:
    """Primeros `max_chars` caracteres del cuerpo, como texto."""

    return response.text[:max_chars]


@lru_cache(maxsize=None)
def _adapter(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _type_name(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)


def decode(response: httpx.Response, target: type[M]) -> M:
    """Valida el cuerpo JSON de `response` contra `target`."""

    name = _type_name(target)
    if not response.content.strip():
        raise DecodeError(
            f"Failed to decode response into {name}: the body is empty.",
            target=name,
            preview="",
        )

    try:
        return _adapter(target).validate_json(response.content)
    except ValidationError as exc:
        body = preview(response)
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
        raise DecodeError(
            f"Failed to decode response into {name} ({exc.__class__.__name__}, "
            f"{exc.error_count()} error(s); first at {location}: {first.get('msg')})\n"
            f"Preview: {body}",
            target=name,
            preview=body,
        ) from exc


def decode_data(response: httpx.Response, target: type[M]) -> M:
    """Decodifica `{data: T}` y devuelve solo `data`."""

    return decode(response, DataEnvelope[target]).data  # type: ignore[valid-type]
