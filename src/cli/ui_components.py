"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.categories import ReportCategory
from core.domain.models import BulkReport, CheckedBlock, CheckedIP, IPReport


def _fmt_dt(value: datetime | None) -> str:
    return value.isoformat(timespec="seconds") if value else "-"


def _score_style(score: int) -> str:
    if score >= 75:
        return "bold red"
    if score >= 25:
        return "yellow"
    return "green"


def build_checked_ip_panel(checked: CheckedIP) -> Panel:
    """Panel con el resultado de `check`."""

    body = Table.grid(padding=(0, 2))
    body.add_column(style="bold")
    body.add_column()
    body.add_row("IP", checked.ip_address)
    body.add_row("Public", str(checked.is_public))
    body.add_row("Whitelisted", str(checked.is_whitelisted))
    body.add_row(
        "Abuse confidence",
        Text(f"{checked.abuse_confidence}%", style=_score_style(checked.abuse_confidence)),
    )
    country = checked.country_name or "-"
    body.add_row("Country", f"{country} ({checked.country_code or '-'})")
    body.add_row("ISP", checked.isp or "-")
    body.add_row("Usage type", checked.usage_type or "-")
    body.add_row("Domain", checked.domain or "-")
    body.add_row("Hostnames", ", ".join(checked.hostnames) or "-")
    body.add_row(
        "Reports",
        f"{checked.total_reports} from {checked.distinct_user_count} distinct users",
    )
    body.add_row("Last report", _fmt_dt(checked.last_reported_at))
    return Panel(body, title=Text("Check", style="bold yellow"), border_style="yellow")


def build_reports_table(reports: Sequence[IPReport], *, title: str = "Reports") -> Table:
    table = Table(title=title)
    table.add_column("Reported at", style="cyan", no_wrap=True)
    table.add_column("Country", style="white")
    table.add_column("Categories", style="magenta")
    table.add_column("Comment", style="dim")
    for report in reports:
        comment = (report.comment or "").strip().replace("\n", " ")
        table.add_row(
            _fmt_dt(report.reported_at),
            report.reporter_country_code or "-",
            ", ".join(c.label() for c in report.categories),
            comment[:120],
        )
    return table


def build_block_table(block: CheckedBlock) -> Table:
    title = (
        f"{block.network_address}/{block.netmask} "
        f"({block.min_address} - {block.max_address}, {block.possible_host_count} hosts)"
    )
    table = Table(title=title, caption=block.address_space)
    table.add_column("#", style="dim", no_wrap=True)
    table.add_column("IP", style="cyan")
    table.add_column("Reports", style="white")
    table.add_column("Confidence")
    table.add_column("Most recent", style="dim")
    for i, ip in enumerate(block.reported_ips, start=1):
        table.add_row(
            str(i),
            ip.ip_address,
            str(ip.report_count),
            Text(f"{ip.abuse_confidence}%", style=_score_style(ip.abuse_confidence)),
            _fmt_dt(ip.most_recent_report),
        )
    return table


def build_bulk_report_table(result: BulkReport) -> Table:
    table = Table(title=f"Saved reports: {result.saved_reports}")
    table.add_column("Row", style="dim", no_wrap=True)
    table.add_column("Input", style="white")
    table.add_column("Error", style="red")
    for invalid in result.invalid_reports:
        table.add_row(str(invalid.row_number), invalid.input, invalid.error)
    return table


def build_categories_table() -> Table:
    table = Table(title="Report categories")
    table.add_column("Code", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    for category in ReportCategory:
        table.add_row(str(int(category)), category.name.lower().replace("_", "-"))
    return table
