from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from adapters.abuseipdb import AbuseIPDBClient
from adapters.abuseipdb import request as request_module
from adapters.http_client import build_async_client
from core.config import AppSettings

BASE_URL = "https://api.abuseipdb.com/api/v2/"

Handler = Callable[[httpx.Request], httpx.Response]


def json_response(status: int, payload: Any, headers: dict[str, str] | None = None) -> httpx.Response:
    return httpx.Response(status, json=payload, headers=headers)


def error_body(*errors: tuple[str, int, str | None]) -> dict[str, Any]:
    items = []
    for detail, status, parameter in errors:
        item: dict[str, Any] = {"detail": detail, "status": status}
        if parameter is not None:
            item["source"] = {"parameter": parameter}
        items.append(item)
    return {"errors": items}


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None, api_key="test-key", retry_delay_seconds=3.0)


@pytest.fixture
def sleeps(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Records backoff sleeps instead of waiting."""

    calls: list[float] = []

    async def _fake_sleep(delay: float) -> None:
        calls.append(delay)

    monkeypatch.setattr(request_module.asyncio, "sleep", _fake_sleep)
    return calls


@pytest.fixture
def make_http(settings: AppSettings) -> Callable[[Handler], httpx.AsyncClient]:
    def _make(handler: Handler) -> httpx.AsyncClient:
        return build_async_client(settings, transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def make_client(settings: AppSettings, sleeps: list[float]) -> Callable[..., AbuseIPDBClient]:
    def _make(handler: Handler, **kwargs: Any) -> AbuseIPDBClient:
        client_settings = kwargs.pop("settings", settings)
        return AbuseIPDBClient(
            settings=client_settings,
            http_client=build_async_client(client_settings, transport=httpx.MockTransport(handler)),
            **kwargs,
        )

    return _make
