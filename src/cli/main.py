"""CLI principal (Typer).

Cada comando es una capa fina sobre `AbuseIPDBClient`: parsea argumentos,
ejecuta una operación y pinta el resultado con Rich.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, TypeVar

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from adapters.abuseipdb import AbuseIPDBClient
from adapters.blacklist_exporter import export_blacklist
from cli import doctor
from cli.ui_components import (
    build_block_table,
    build_bulk_report_table,
    build_categories_table,
    build_checked_ip_panel,
    build_reports_table,
)
from core.config import AppSettings
from core.domain.categories import ReportCategory
from core.errors import AbuseIPDBError, ApiError

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="AbuseIPDB command line client.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


def _client() -> AbuseIPDBClient:
    try:
        return AbuseIPDBClient(settings=AppSettings())
    except ValueError:
        _console.print(
            "[red]No API key configured.[/red] Run `doctor setup` or set ABUSEIPDB_API_KEY."
        )
        raise typer.Exit(code=1) from None


def _run(operation: Callable[[AbuseIPDBClient], Awaitable[T]]) -> T:
    """Ejecuta una operación con un cliente efímero y traduce los errores a la CLI."""

    client = _client()

    async def _go() -> T:
        async with client:
            return await operation(client)

    try:
        return asyncio.run(_go())
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except AbuseIPDBError as exc:
        _console.print(f"[red]{exc.__class__.__name__}:[/red] {escape(str(exc))}")
        if isinstance(exc, ApiError) and exc.retry_after_ms is not None:
            _console.print(f"[yellow]Retry after {exc.retry_after_ms / 1000:.0f}s.[/yellow]")
        raise typer.Exit(code=1) from exc


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every request and retry."),
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        )
        # httpx/httpcore son muy ruidosos en DEBUG.
        logging.getLogger("httpcore").setLevel(logging.WARNING)


@app.command()
def check(
    ip: str = typer.Argument(..., help="IP address to check."),
    max_age: int = typer.Option(90, "--max-age", help="Only consider reports newer than N days."),
    verbose_output: bool = typer.Option(True, "--verbose-output/--brief", help="Include reports and country name."),
    as_json: bool = typer.Option(False, "--json", help="Print the raw result as JSON."),
) -> None:
    """Check the reputation of a single IP address."""

    checked = _run(lambda c: c.check(ip, verbose=verbose_output, max_age=max_age))
    if as_json:
        typer.echo(checked.model_dump_json(by_alias=True, indent=2))
        return

    _console.print(build_checked_ip_panel(checked))
    if checked.reports:
        _console.print(build_reports_table(checked.reports, title=f"Preview of {len(checked.reports)} reports"))


@app.command()
def reports(
    ip: str = typer.Argument(..., help="IP address to get reports for."),
    limit: int = typer.Option(100, "--limit", "-n", help="Maximum number of reports."),
    max_age: int = typer.Option(90, "--max-age", help="Only consider reports newer than N days."),
) -> None:
    """Fetch the latest reports of an IP address (paginated)."""

    items = _run(lambda c: c.get_reports(ip, limit=limit, max_age=max_age))
    _console.print(build_reports_table(items, title=f"{len(items)} reports for {ip}"))
    countries = sorted({r.reporter_country_code for r in items if r.reporter_country_code})
    if countries:
        _console.print(f"Submitted from: {', '.join(countries)}")


@app.command()
def blacklist(
    limit: int = typer.Option(10_000, "--limit", "-n", help="Maximum number of IPs (capped by plan)."),
    confidence_minimum: Optional[int] = typer.Option(None, "--confidence-minimum", help="Minimum abuse score (subscribers)."),
    only_countries: Optional[List[str]] = typer.Option(None, "--only-country", help="ISO 3166 alpha-2 code to include."),
    except_countries: Optional[List[str]] = typer.Option(None, "--except-country", help="ISO 3166 alpha-2 code to omit."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to a .txt (one IP per line) or .json file."),
) -> None:
    """Download the blacklist of most reported IP addresses."""

    ips = _run(
        lambda c: c.get_blacklist(
            limit=limit,
            confidence_minimum=confidence_minimum,
            only_countries=only_countries,
            except_countries=except_countries,
        )
    )
    if output is not None:
        path = export_blacklist(ips=ips, output_path=output)
        _console.print(f"[green]Saved {len(ips)} IPs to:[/green] {path}")
        return
    for item in ips:
        typer.echo(item.ip_address)


@app.command()
def report(
    ip: str = typer.Argument(..., help="IP address to report."),
    category: List[str] = typer.Option(..., "--category", "-c", help="Category code or name (repeatable)."),
    comment: Optional[str] = typer.Option(None, "--comment", help="Description of the activity, without PII."),
) -> None:
    """Submit an abuse report for an IP address."""

    try:
        categories = [ReportCategory.parse(value) for value in category]
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--category") from exc

    result = _run(lambda c: c.report(ip, categories, comment))
    _console.print(
        f"[green]Reported {result.ip_address}[/green], abuse confidence score: {result.abuse_confidence}%"
    )


@app.command(name="bulk-report")
def bulk_report(
    csv_path: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="CSV file to upload."),
) -> None:
    """Report many IP addresses at once from a CSV file."""

    with csv_path.open("rb") as stream:
        result = _run(lambda c: c.bulk_report(stream))
    _console.print(build_bulk_report_table(result))


@app.command(name="check-block")
def check_block(
    network: str = typer.Argument(..., help="CIDR network, e.g. 186.2.163.0/24."),
    max_age: int = typer.Option(30, "--max-age", help="Only consider reports newer than N days."),
) -> None:
    """Check a CIDR network for recently reported addresses."""

    block = _run(lambda c: c.check_block(network, max_age=max_age))
    _console.print(build_block_table(block))


@app.command()
def clear(
    ips: List[str] = typer.Argument(..., help="IP addresses whose reports should be deleted."),
) -> None:
    """Delete all of your reports on one or more IP addresses."""

    async def _clear_all(client: AbuseIPDBClient) -> int:
        deleted = 0
        for ip in ips:
            deleted += (await client.clear_address(ip)).reports_deleted
        return deleted

    deleted = _run(_clear_all)
    _console.print(f"[green]Deleted {deleted} reports.[/green]")


@app.command()
def categories(
    as_json: bool = typer.Option(False, "--json", help="Print as JSON."),
) -> None:
    """List the report categories."""

    if as_json:
        typer.echo(json.dumps({c.name.lower(): int(c) for c in ReportCategory}, indent=2))
        return
    _console.print(build_categories_table())


def run() -> None:
    app()


if __name__ == "__main__":
    run()
