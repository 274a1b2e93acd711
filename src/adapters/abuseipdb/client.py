"""Cliente asíncrono de AbuseIPDB.

Cada método valida sus argumentos antes de tocar la red, delega el envío en
`request.execute` y desempaqueta el `data` de la respuesta.
"""

from __future__ import annotations

import inspect
from typing import IO, Any, Iterable, Mapping, Sequence, TypeVar, Union

import httpx

from adapters.abuseipdb.decoding import decode, decode_data
from adapters.abuseipdb.pagination import PAGE_SIZE, accumulate_pages
from adapters.abuseipdb.request import JsonBody, RequestBody, StreamBody, execute
from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.categories import ReportCategory
from core.domain.models import (
    BlacklistedIP,
    BlacklistEnvelope,
    BulkReport,
    CheckedBlock,
    CheckedIP,
    ClearedAddress,
    IPReport,
    ReportedIP,
    ReportPayload,
    ReportsPage,
)
from core.interfaces.converters import ResponseConverter

T = TypeVar("T")

BULK_REPORT_FIELD = "csv"
BULK_REPORT_FILE_NAME = "reports.csv"


def _require(value: str | None, message: str) -> str:
    if value is None or not str(value).strip():
        raise ValueError(message)
    return str(value).strip()


def _require_positive(value: int, name: str) -> int:
    if value <= 0:
        raise ValueError(f"{name} has to be a positive value.")
    return value


class AbuseIPDBClient:
    """Punto de entrada para interactuar con la API.

    Uso:

        async with AbuseIPDBClient("key") as client:
            checked = await client.check("1.1.1.1")

    Una instancia puede compartirse entre tareas concurrentes.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        settings: AppSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
        report_converter: ResponseConverter[ReportedIP] | None = None,
        bulk_report_converter: ResponseConverter[BulkReport] | None = None,
    ) -> None:
        settings = settings or AppSettings()
        if api_key is not None:
            settings = settings.model_copy(update={"api_key": api_key})
        if not settings.api_key or not settings.api_key.strip():
            raise ValueError("An empty or missing API key was provided.")

        self._settings = settings
        self._owns_http_client = http_client is None
        # Un `http_client` inyectado debe venir de `build_async_client`.
        self._http = http_client or build_async_client(settings)
        self._report_converter = report_converter
        self._bulk_report_converter = bulk_report_converter

    @property
    def settings(self) -> AppSettings:
        return self._settings

    async def __aenter__(self) -> "AbuseIPDBClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: RequestBody | None = None,
        absolute_url: bool = False,
    ) -> httpx.Response:
        return await execute(
            self._http,
            method,
            path,
            params=params,
            body=body,
            absolute_url=absolute_url,
            base_url=self._settings.base_url,
            max_retries=self._settings.max_retries,
            retry_delay_seconds=self._settings.retry_delay_seconds,
        )

    @staticmethod
    async def _convert(converter: ResponseConverter[T], response: httpx.Response) -> T:
        result = converter(response)
        if inspect.isawaitable(result):
            result = await result
        return result  # type: ignore[return-value]

    async def check(self, ip: str, verbose: bool = True, max_age: int = 90) -> CheckedIP:
        """Consulta una IP; con `verbose` incluye reportes y nombre de país."""

        ip = _require(ip, "IP address to check is null or empty.")
        _require_positive(max_age, "Max age")

        params: dict[str, Any] = {"ipAddress": ip, "maxAgeInDays": max_age}
        if verbose:
            params["verbose"] = ""
        response = await self._send("GET", "check", params=params)
        return decode_data(response, CheckedIP)

    async def get_reports(self, ip: str, limit: int = 100, max_age: int = 90) -> list[IPReport]:
        """Devuelve hasta `limit` reportes de una IP, del más reciente al más antiguo."""

        ip = _require(ip, "IP address to use is null or empty.")
        _require_positive(limit, "Limit")
        _require_positive(max_age, "Max age")

        async def fetch_page(page: int, per_page: int) -> ReportsPage:
            response = await self._send(
                "GET",
                "reports",
                params={
                    "ipAddress": ip,
                    "maxAgeInDays": max_age,
                    "page": page,
                    "perPage": per_page,
                },
            )
            return decode_data(response, ReportsPage)

        return await accumulate_pages(fetch_page, limit, per_page=PAGE_SIZE)

    async def get_blacklist(
        self,
        limit: int = 10_000,
        confidence_minimum: int | None = None,
        only_countries: Sequence[str] | None = None,
        except_countries: Sequence[str] | None = None,
    ) -> list[BlacklistedIP]:
        """Exporta la blacklist. `limit` está capado por el plan de suscripción."""

        _require_positive(limit, "Limit")
        if confidence_minimum is not None and not 0 <= confidence_minimum <= 100:
            raise ValueError("Minimum confidence score has to be a valid percentage value.")

        params: dict[str, Any] = {"limit": limit}
        if confidence_minimum is not None:
            params["confidenceMinimum"] = confidence_minimum
        if only_countries:
            params["onlyCountries"] = ",".join(only_countries)
        if except_countries:
            params["exceptCountries"] = ",".join(except_countries)

        response = await self._send("GET", "blacklist", params=params)
        return decode(response, BlacklistEnvelope).data

    async def report(
        self,
        ip: str,
        categories: Iterable[ReportCategory | int | str],
        comment: str | None = None,
    ) -> ReportedIP:
        """Envía un reporte de abuso.

        El comentario debe ir sin datos personales (PII).
        """

        ip = _require(ip, "IP address to use is null or empty.")
        parsed = [ReportCategory.parse(c) for c in categories]
        if not parsed:
            raise ValueError("At least one report category is required.")

        payload = ReportPayload(ip=ip, categories=parsed, comment=comment)
        endpoint = self._settings.report_endpoint
        response = await self._send(
            "POST",
            endpoint or "report",
            body=JsonBody(payload),
            absolute_url=endpoint is not None,
        )

        if self._report_converter is not None:
            return await self._convert(self._report_converter, response)
        return decode_data(response, ReportedIP)

    async def bulk_report(self, csv_stream: Union[IO[bytes], bytes]) -> BulkReport:
        """Reporta muchas IPs a la vez a partir de un CSV (hasta 10.000 líneas)."""

        if csv_stream is None:
            raise ValueError("CSV stream to bulk report is null.")

        endpoint = self._settings.bulk_report_endpoint
        response = await self._send(
            "POST",
            endpoint or "bulk-report",
            body=StreamBody(csv_stream, BULK_REPORT_FIELD, BULK_REPORT_FILE_NAME),
            absolute_url=endpoint is not None,
        )

        if self._bulk_report_converter is not None:
            return await self._convert(self._bulk_report_converter, response)
        return decode_data(response, BulkReport)

    async def check_block(self, network: str, max_age: int = 30) -> CheckedBlock:
        """Consulta una red CIDR completa (p.ej. `186.2.163.0/24`)."""

        network = _require(network, "Network to block check is null or empty.")
        _require_positive(max_age, "Max age")

        response = await self._send(
            "GET",
            "check-block",
            params={"network": network, "maxAgeInDays": max_age},
        )
        return decode_data(response, CheckedBlock)

    async def clear_address(self, ip: str) -> ClearedAddress:
        """Borra todos los reportes propios sobre una IP."""

        ip = _require(ip, "IP address to clear is null or empty.")
        response = await self._send("DELETE", "clear-address", params={"ipAddress": ip})
        return decode_data(response, ClearedAddress)
