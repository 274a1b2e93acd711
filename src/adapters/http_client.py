"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts y headers fijos de la API (Accept, Key, User-Agent).
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con los headers fijos de AbuseIPDB.

    El cliente resultante es seguro para reutilizar desde muchas tareas
    concurrentes; solo se comparte configuración de solo lectura.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
        "Accept-Encoding": "gzip, deflate",
    }
    if settings.api_key:
        headers["Key"] = settings.api_key
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )
