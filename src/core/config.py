"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- El cliente HTTP y la CLI leen la misma configuración inmutable.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

API_VERSION = 2
DEFAULT_BASE_URL = f"https://api.abuseipdb.com/api/v{API_VERSION}/"
DEFAULT_USER_AGENT = "abuseipdb-d2/0.1 (python-httpx)"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "abuseipdb-d2"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "abuseipdb-d2"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "abuseipdb-d2"
    return Path.home() / ".config" / "abuseipdb-d2"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# abuseipdb-d2 user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central del cliente.

    Es de solo lectura una vez construida: se comparte entre todas las
    peticiones concurrentes que haga la aplicación.
    """

    model_config = SettingsConfigDict(
        env_prefix="ABUSEIPDB_",
        extra="ignore",
        case_sensitive=False,
        frozen=True,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    api_key: str | None = Field(
        default=None,
        description="API key de AbuseIPDB (https://www.abuseipdb.com/account/api).",
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL,
        min_length=8,
        description="Base URL de la API; las rutas relativas se concatenan a ella.",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        min_length=1,
        description="User-Agent enviado en cada petición.",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Reintentos adicionales ante errores 5xx.",
    )
    retry_delay_seconds: float = Field(
        default=3.0,
        ge=0,
        description="Espera fija antes de cada reintento (segundos).",
    )

    # Mirrors/proxies compatibles con la API (URL absoluta).
    report_endpoint: str | None = Field(
        default=None,
        description="URL absoluta alternativa para POST report.",
    )
    bulk_report_endpoint: str | None = Field(
        default=None,
        description="URL absoluta alternativa para POST bulk-report.",
    )

    @field_validator("base_url")
    @classmethod
    def _ensure_trailing_slash(cls, value: str) -> str:
        return value if value.endswith("/") else value + "/"
