"""Exportación de la blacklist a disco.

Formatos:
- `txt`: una IP por línea (listo para firewalls/ipsets).
- `json`: los registros completos con formato estable.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Literal, Sequence

from core.domain.models import BlacklistedIP

ExportFormat = Literal["txt", "json"]


def export_blacklist(
    *,
    ips: Sequence[BlacklistedIP],
    output_path: Path,
    fmt: ExportFormat | None = None,
) -> Path:
    """Escribe la blacklist en UTF-8; el formato se deduce de la extensión si no se indica."""

    fmt = fmt or ("json" if output_path.suffix.lower() == ".json" else "txt")
    output_path.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "json":
        payload = [ip.model_dump(mode="json", by_alias=True) for ip in ips]
        text = json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"
    else:
        text = "".join(f"{ip.ip_address}\n" for ip in ips)

    output_path.write_text(text, encoding="utf-8")
    return output_path
