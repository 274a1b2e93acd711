from __future__ import annotations

import pytest

from core.domain.categories import ReportCategory


def test_there_are_23_contiguous_codes() -> None:
    assert len(ReportCategory) == 23
    assert [int(c) for c in ReportCategory] == list(range(1, 24))


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (18, ReportCategory.BRUTE_FORCE),
        ("22", ReportCategory.SSH),
        (" 4 ", ReportCategory.DDOS_ATTACK),
        ("brute-force", ReportCategory.BRUTE_FORCE),
        ("Web App Attack", ReportCategory.WEB_APP_ATTACK),
        ("IOT_TARGETED", ReportCategory.IOT_TARGETED),
    ],
)
def test_parse_accepts_codes_and_names(value, expected) -> None:
    assert ReportCategory.parse(value) is expected


@pytest.mark.parametrize("value", [0, 24, "99", "ransomware"])
def test_parse_rejects_unknown_values(value) -> None:
    with pytest.raises(ValueError):
        ReportCategory.parse(value)


def test_join_uses_numeric_codes() -> None:
    assert ReportCategory.join([ReportCategory.DDOS_ATTACK, ReportCategory.FTP_BRUTE_FORCE, ReportCategory.PHISHING]) == "4,5,7"
    assert ReportCategory.SQL_INJECTION.label() == "Sql Injection"
