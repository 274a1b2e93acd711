from __future__ import annotations

import json
from pathlib import Path

from adapters.blacklist_exporter import export_blacklist
from core.domain.models import BlacklistedIP

IPS = [
    BlacklistedIP(ip_address="5.188.10.179", country_code="RU", abuse_confidence=100),
    BlacklistedIP(ip_address="185.222.209.14", country_code="NL", abuse_confidence=100),
]


def test_text_export_writes_one_ip_per_line(tmp_path: Path) -> None:
    path = export_blacklist(ips=IPS, output_path=tmp_path / "out" / "blacklist.txt")

    assert path.read_text(encoding="utf-8") == "5.188.10.179\n185.222.209.14\n"


def test_json_export_is_picked_from_extension(tmp_path: Path) -> None:
    path = export_blacklist(ips=IPS, output_path=tmp_path / "blacklist.json")

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data[0]["ipAddress"] == "5.188.10.179"
    assert data[1]["abuseConfidenceScore"] == 100
