"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Los nombres JSON de la API (camelCase) se mapean con `alias` y el resto del
  código trabaja con nombres Python.
- La validación detecta drift de esquema en lugar de rellenar defaults.

Nota:
- Estos modelos describen *qué* devuelve la API, no *cómo* se obtiene.
"""

from __future__ import annotations

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, Field, field_serializer
from pydantic.config import ConfigDict

from core.domain.categories import ReportCategory

T = TypeVar("T")


class ApiModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# Envelopes -------------------------------------------------------------------


class DataEnvelope(ApiModel, Generic[T]):
    """`{data: T}`: forma de toda respuesta exitosa."""

    data: T


class ApiErrorSource(ApiModel):
    parameter: str | None = Field(
        default=None,
        description="Parámetro de la petición que causó el error.",
    )


class ApiErrorItem(ApiModel):
    """Un elemento de `{errors: [...]}`.

    `index` no viene de la API: lo asigna el pipeline según la posición.
    """

    detail: str = Field(..., description="Mensaje legible del error.")
    status: int = Field(..., description="Código HTTP asociado al error.")
    source: ApiErrorSource | None = Field(default=None)
    index: int = Field(default=0, ge=0, exclude=True)

    @property
    def parameter(self) -> str | None:
        return self.source.parameter if self.source else None


class ErrorEnvelope(ApiModel):
    errors: list[ApiErrorItem] = Field(...)


# check -----------------------------------------------------------------------


class IPReport(ApiModel):
    reported_at: datetime = Field(..., alias="reportedAt")
    comment: str | None = Field(default=None, alias="comment")
    categories: list[ReportCategory] = Field(default_factory=list, alias="categories")
    reporter_id: int = Field(..., alias="reporterId")
    reporter_country_code: str | None = Field(default=None, alias="reporterCountryCode")
    reporter_country_name: str | None = Field(default=None, alias="reporterCountryName")


class CheckedIP(ApiModel):
    """Resultado de `GET check`."""

    ip_address: str = Field(..., alias="ipAddress")
    is_public: bool = Field(default=True, alias="isPublic")
    ip_version: int = Field(default=4, alias="ipVersion")
    is_whitelisted: bool | None = Field(default=None, alias="isWhitelisted")
    abuse_confidence: int = Field(..., ge=0, le=100, alias="abuseConfidenceScore")
    country_code: str | None = Field(default=None, alias="countryCode")
    country_name: str | None = Field(
        default=None,
        alias="countryName",
        description="Solo presente con `verbose`.",
    )
    usage_type: str | None = Field(default=None, alias="usageType")
    isp: str | None = Field(default=None, alias="isp")
    domain: str | None = Field(default=None, alias="domain")
    hostnames: list[str] = Field(default_factory=list, alias="hostnames")
    total_reports: int = Field(default=0, alias="totalReports")
    distinct_user_count: int = Field(default=0, alias="numDistinctUsers")
    last_reported_at: datetime | None = Field(default=None, alias="lastReportedAt")
    reports: list[IPReport] | None = Field(
        default=None,
        alias="reports",
        description="Solo presente con `verbose`.",
    )


# reports ---------------------------------------------------------------------


class ReportsPage(ApiModel):
    """Una página de `GET reports`."""

    total: int = Field(..., alias="total")
    page: int = Field(..., alias="page")
    last_page: int = Field(..., alias="lastPage")
    count: int = Field(..., alias="count")
    per_page: int = Field(..., alias="perPage")
    next_page_url: str | None = Field(default=None, alias="nextPageUrl")
    previous_page_url: str | None = Field(default=None, alias="previousPageUrl")
    results: list[IPReport] = Field(default_factory=list, alias="results")


# blacklist -------------------------------------------------------------------


class BlacklistedIP(ApiModel):
    ip_address: str = Field(..., alias="ipAddress")
    country_code: str | None = Field(default=None, alias="countryCode")
    abuse_confidence: int = Field(..., ge=0, le=100, alias="abuseConfidenceScore")
    last_reported_at: datetime | None = Field(default=None, alias="lastReportedAt")


class BlacklistMeta(ApiModel):
    generated_at: datetime = Field(..., alias="generatedAt")


class BlacklistEnvelope(DataEnvelope[list[BlacklistedIP]]):
    meta: BlacklistMeta | None = Field(default=None)


# report ----------------------------------------------------------------------


class ReportPayload(ApiModel):
    """Cuerpo JSON de `POST report`."""

    ip: str = Field(..., min_length=1, alias="ip")
    categories: list[ReportCategory] = Field(..., min_length=1, alias="categories")
    comment: str | None = Field(default=None, alias="comment")

    @field_serializer("categories")
    def _serialize_categories(self, value: list[ReportCategory]) -> str:
        return ReportCategory.join(value)


class ReportedIP(ApiModel):
    """Resultado de `POST report`."""

    ip_address: str = Field(..., alias="ipAddress")
    abuse_confidence: int = Field(..., ge=0, le=100, alias="abuseConfidenceScore")


# bulk-report -----------------------------------------------------------------


class InvalidReport(ApiModel):
    error: str = Field(..., alias="error")
    input: str = Field(..., alias="input")
    row_number: int = Field(..., alias="rowNumber")


class BulkReport(ApiModel):
    saved_reports: int = Field(..., alias="savedReports")
    invalid_reports: list[InvalidReport] = Field(default_factory=list, alias="invalidReports")


# check-block -----------------------------------------------------------------


class CheckBlockIP(ApiModel):
    ip_address: str = Field(..., alias="ipAddress")
    report_count: int = Field(..., alias="numReports")
    most_recent_report: datetime | None = Field(default=None, alias="mostRecentReport")
    abuse_confidence: int = Field(..., ge=0, le=100, alias="abuseConfidenceScore")
    country_code: str | None = Field(default=None, alias="countryCode")


class CheckedBlock(ApiModel):
    """Resultado de `GET check-block`."""

    network_address: str = Field(..., alias="networkAddress")
    netmask: str = Field(..., alias="netmask")
    min_address: str = Field(..., alias="minAddress")
    max_address: str = Field(..., alias="maxAddress")
    possible_host_count: int = Field(..., alias="numPossibleHosts")
    address_space: str | None = Field(default=None, alias="addressSpaceDesc")
    reported_ips: list[CheckBlockIP] = Field(default_factory=list, alias="reportedAddress")


# clear-address ---------------------------------------------------------------


class ClearedAddress(ApiModel):
    reports_deleted: int = Field(..., alias="numReportsDeleted")
