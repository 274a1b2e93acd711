"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.abuseipdb import AbuseIPDBClient
from adapters.http_client import build_async_client
from core.config import DEFAULT_BASE_URL, AppSettings, write_user_env_vars
from core.errors import AbuseIPDBError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings) -> tuple[bool, str]:
    try:
        async with build_async_client(settings) as client:
            response = await client.get(settings.base_url)
        return True, f"HTTP {response.status_code}"
    except httpx.HTTPError as exc:
        return False, str(exc) or exc.__class__.__name__


async def _check_auth(settings: AppSettings) -> tuple[bool, str]:
    """Run a cheap `check` on the loopback address to validate the key."""

    try:
        async with AbuseIPDBClient(settings=settings) as client:
            checked = await client.check("127.0.0.1", verbose=False)
        return True, f"check {checked.ip_address} -> {checked.abuse_confidence}%"
    except (AbuseIPDBError, httpx.HTTPError) as exc:
        return False, str(exc).splitlines()[0] if str(exc) else exc.__class__.__name__


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="AbuseIPDB-D2 Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    has_key = bool(settings.api_key)
    table.add_row("API key", "OK" if has_key else "MISSING", "Configured" if has_key else "Run `doctor setup`")
    table.add_row("Base URL", "OK", settings.base_url)
    if settings.report_endpoint:
        table.add_row("Report endpoint", "OVERRIDE", settings.report_endpoint)
    if settings.bulk_report_endpoint:
        table.add_row("Bulk report endpoint", "OVERRIDE", settings.bulk_report_endpoint)
    table.add_row("Retries", "OK", f"{settings.max_retries} x {settings.retry_delay_seconds:.1f}s on 5xx")

    # Connectivity (best-effort)
    ok_http, detail_http = asyncio.run(_check_http(settings))
    table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    if has_key and ok_http:
        ok_auth, detail_auth = asyncio.run(_check_auth(settings))
        table.add_row("API auth", "OK" if ok_auth else "FAIL", detail_auth)

    _console.print(table)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores the API key in the user config .env)."""

    api_key = typer.prompt("AbuseIPDB API key", hide_input=True, confirmation_prompt=False).strip()
    if not api_key:
        raise typer.BadParameter("api key is required")

    base_url = typer.prompt(
        "API base URL",
        default=DEFAULT_BASE_URL,
        show_default=True,
    ).strip()

    env_path = write_user_env_vars(
        {
            "ABUSEIPDB_API_KEY": api_key,
            "ABUSEIPDB_BASE_URL": base_url,
        }
    )

    _console.print(f"[green]Saved config to:[/green] {env_path}")
