from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from core.config import DEFAULT_BASE_URL, AppSettings, write_user_env_vars


def test_defaults_match_the_public_api() -> None:
    settings = AppSettings(_env_file=None)

    assert settings.base_url == DEFAULT_BASE_URL == "https://api.abuseipdb.com/api/v2/"
    assert settings.max_retries == 3
    assert settings.retry_delay_seconds == 3.0
    assert settings.report_endpoint is None


def test_environment_variables_use_prefix(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ABUSEIPDB_API_KEY", "env-key")
    monkeypatch.setenv("ABUSEIPDB_BASE_URL", "https://proxy.example/api/v2")
    monkeypatch.setenv("ABUSEIPDB_MAX_RETRIES", "1")

    settings = AppSettings(_env_file=None)

    assert settings.api_key == "env-key"
    assert settings.base_url == "https://proxy.example/api/v2/"
    assert settings.max_retries == 1


def test_settings_are_read_only() -> None:
    settings = AppSettings(_env_file=None, api_key="k")
    with pytest.raises(ValidationError):
        settings.api_key = "other"  # type: ignore[misc]


def test_env_file_is_read(tmp_path: Path) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("ABUSEIPDB_API_KEY=from-file\nABUSEIPDB_RETRY_DELAY_SECONDS=0.5\n", encoding="utf-8")

    settings = AppSettings(_env_file=env_file)

    assert settings.api_key == "from-file"
    assert settings.retry_delay_seconds == 0.5


def test_write_user_env_vars_merges_existing_values(tmp_path: Path) -> None:
    env_file = tmp_path / "cfg" / ".env"
    write_user_env_vars({"ABUSEIPDB_API_KEY": "old", "ABUSEIPDB_BASE_URL": "https://a/"}, env_path=env_file)
    write_user_env_vars({"ABUSEIPDB_API_KEY": "new"}, env_path=env_file)

    lines = env_file.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("#")
    assert "ABUSEIPDB_API_KEY=new" in lines
    assert "ABUSEIPDB_BASE_URL=https://a/" in lines
