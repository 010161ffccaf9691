"""
tests/test_db_config.py

Environment loading and database URL resolution.
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from db.config import load_env_files, normalize_postgres_url, resolve_database_url

_URL_VARS = ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL", "ENVIRONMENT")


@pytest.fixture()
def env_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    # load_env_files writes straight into os.environ; give each test its own copy.
    environ = {
        key: value
        for key, value in os.environ.items()
        if key not in _URL_VARS and key != "MANUAL_INPUT_MAX_ROWS"
    }
    environ["MANUAL_METRICS_ENV_DIR"] = str(tmp_path)
    monkeypatch.setattr(os, "environ", environ)
    return tmp_path


class TestLoadEnvFiles:
    def test_reads_env_dir_override(self, env_dir: Path) -> None:
        (env_dir / ".env").write_text("MANUAL_INPUT_MAX_ROWS=42\n", encoding="utf-8")
        load_env_files()
        assert os.environ["MANUAL_INPUT_MAX_ROWS"] == "42"

    def test_export_prefix_and_quotes(self, env_dir: Path) -> None:
        (env_dir / ".env").write_text(
            "# local database\nexport LOCAL_DATABASE_URL=\"postgresql://u:p@localhost/metrics\"\n",
            encoding="utf-8",
        )
        load_env_files()
        assert os.environ["LOCAL_DATABASE_URL"] == "postgresql://u:p@localhost/metrics"

    def test_process_environment_wins(
        self, env_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("MANUAL_INPUT_MAX_ROWS", "7")
        (env_dir / ".env").write_text("MANUAL_INPUT_MAX_ROWS=42\n", encoding="utf-8")
        load_env_files()
        assert os.environ["MANUAL_INPUT_MAX_ROWS"] == "7"


class TestResolveDatabaseUrl:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("postgres://u@h/db", "postgresql+psycopg://u@h/db"),
            ("postgresql://u@h/db", "postgresql+psycopg://u@h/db"),
            ("postgresql+psycopg://u@h/db", "postgresql+psycopg://u@h/db"),
        ],
    )
    def test_normalize(self, url: str, expected: str) -> None:
        assert normalize_postgres_url(url) == expected

    def test_cloud_url_only_in_cloud_like_environment(
        self, env_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("CLOUD_DATABASE_URL", "postgresql://cloud/db")
        monkeypatch.setenv("LOCAL_DATABASE_URL", "postgresql://local/db")
        assert resolve_database_url() == "postgresql+psycopg://local/db"
        monkeypatch.setenv("ENVIRONMENT", "Production")
        assert resolve_database_url() == "postgresql+psycopg://cloud/db"

    def test_direct_url_wins(self, env_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DATABASE_URL", "postgres://direct/db")
        monkeypatch.setenv("LOCAL_DATABASE_URL", "postgresql://local/db")
        assert resolve_database_url() == "postgresql+psycopg://direct/db"

    def test_missing_url_raises(self, env_dir: Path) -> None:
        with pytest.raises(RuntimeError, match="No database URL configured"):
            resolve_database_url()
