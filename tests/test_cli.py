from __future__ import annotations

import json
from functools import partial
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from cli import doctor
from cli import main as cli_main
from core.config import AppSettings, write_user_env_vars

from conftest import error_body, json_response

runner = CliRunner()


@pytest.fixture
def use_handler(monkeypatch: pytest.MonkeyPatch, make_client):
    """Routes CLI commands to a mocked API."""

    def _install(handler) -> None:
        monkeypatch.setattr(cli_main, "_client", lambda: make_client(handler))

    return _install


def test_check_prints_the_result(use_handler) -> None:
    use_handler(
        lambda request: json_response(
            200,
            {
                "data": {
                    "ipAddress": "1.1.1.1",
                    "abuseConfidenceScore": 0,
                    "countryCode": "AU",
                    "countryName": "Australia",
                    "isp": "APNIC and Cloudflare DNS Resolver project",
                    "totalReports": 0,
                    "numDistinctUsers": 0,
                }
            },
        )
    )

    result = runner.invoke(cli_main.app, ["check", "1.1.1.1"])

    assert result.exit_code == 0, result.output
    assert "1.1.1.1" in result.output
    assert "Australia" in result.output


def test_check_json_output(use_handler) -> None:
    use_handler(lambda request: json_response(200, {"data": {"ipAddress": "1.1.1.1", "abuseConfidenceScore": 3}}))

    result = runner.invoke(cli_main.app, ["check", "1.1.1.1", "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["abuseConfidenceScore"] == 3


def test_api_error_exits_with_status_1_and_shows_retry_after(use_handler) -> None:
    use_handler(
        lambda request: json_response(
            429,
            error_body(("Daily rate limit of 1000 requests exceeded for this endpoint.", 429, None)),
            headers={"Retry-After": "30"},
        )
    )

    result = runner.invoke(cli_main.app, ["check", "1.1.1.1"])

    assert result.exit_code == 1
    assert "ApiError" in result.output
    assert "[#1]" in result.output
    assert "Retry after 30s" in result.output


def test_unknown_category_is_a_usage_error(use_handler) -> None:
    use_handler(lambda request: pytest.fail("no request expected"))

    result = runner.invoke(cli_main.app, ["report", "127.0.0.1", "-c", "bogus"])

    assert result.exit_code == 2


def test_report_sends_categories(use_handler) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return json_response(200, {"data": {"ipAddress": "127.0.0.1", "abuseConfidenceScore": 12}})

    use_handler(handler)

    result = runner.invoke(
        cli_main.app, ["report", "127.0.0.1", "-c", "web-spam", "-c", "22", "--comment", "Test Report"]
    )

    assert result.exit_code == 0, result.output
    assert json.loads(seen[0].content)["categories"] == "10,22"
    assert "12%" in result.output


def test_blacklist_is_saved_to_file(use_handler, tmp_path: Path) -> None:
    use_handler(
        lambda request: json_response(
            200,
            {
                "meta": {"generatedAt": "2024-05-01T10:00:00+00:00"},
                "data": [
                    {"ipAddress": "5.188.10.179", "countryCode": "RU", "abuseConfidenceScore": 100},
                    {"ipAddress": "185.222.209.14", "countryCode": "NL", "abuseConfidenceScore": 99},
                ],
            },
        )
    )
    output = tmp_path / "blacklist.txt"

    result = runner.invoke(cli_main.app, ["blacklist", "--limit", "2", "-o", str(output)])

    assert result.exit_code == 0, result.output
    assert output.read_text(encoding="utf-8").split() == ["5.188.10.179", "185.222.209.14"]


def test_clear_sums_deleted_reports(use_handler) -> None:
    use_handler(lambda request: json_response(200, {"data": {"numReportsDeleted": 2}}))

    result = runner.invoke(cli_main.app, ["clear", "127.0.0.1", "127.0.0.2"])

    assert result.exit_code == 0, result.output
    assert "Deleted 4 reports" in result.output


def test_categories_json_lists_all_codes() -> None:
    result = runner.invoke(cli_main.app, ["categories", "--json"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert len(data) == 23
    assert data["ssh"] == 22


def test_missing_api_key_exits_with_hint(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_main, "AppSettings", lambda: AppSettings(_env_file=None, api_key=None))

    result = runner.invoke(cli_main.app, ["check", "1.1.1.1"])

    assert result.exit_code == 1
    assert "No API key configured" in result.output


def test_doctor_setup_stores_key(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    monkeypatch.setattr(doctor, "write_user_env_vars", partial(write_user_env_vars, env_path=env_file))

    result = runner.invoke(cli_main.app, ["doctor", "setup"], input="secret-key\n\n")

    assert result.exit_code == 0, result.output
    text = env_file.read_text(encoding="utf-8")
    assert "ABUSEIPDB_API_KEY=secret-key" in text
    assert "ABUSEIPDB_BASE_URL=https://api.abuseipdb.com/api/v2/" in text
