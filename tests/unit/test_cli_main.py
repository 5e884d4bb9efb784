from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from clinic_import.cli.__main__ import main as cli_main
from clinic_import.cli.__main__ import resolve_dsn
from clinic_import.models.config_models import DatabaseConfig


@pytest.fixture(autouse=True)
def _clean_db_env(monkeypatch):
    for var in ("DATABASE_URL", "PGDSN", "PGHOST", "PGPORT", "PGUSER", "PGPASSWORD", "PGDATABASE"):
        monkeypatch.delenv(var, raising=False)


def test_dry_run_all_imports(write_config, clinic_workbooks, capsys):
    code = cli_main(["--dry-run"])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO dry run: nothing will be written to the database" in out
    assert "SUMMARY imports=3 success=3 failed=0 rows=4 dropped=3" in out


def test_selected_import_only(write_config, clinic_workbooks, capsys):
    code = cli_main(["inpatient", "--dry-run"])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY imports=1 success=1 failed=0 rows=1 dropped=1" in out
    assert "bp_logs" not in out


def test_unknown_import_name(write_config):
    with pytest.raises(SystemExit) as exc_info:
        cli_main(["xray"])
    assert exc_info.value.code == 2


def test_missing_config_is_fatal(temp_workdir: Path, capsys):
    code = cli_main(["--dry-run"])
    out = capsys.readouterr().out
    assert code == 1
    assert "ERROR config: config file not found" in out


def test_unconfigured_import_is_fatal(temp_workdir: Path, capsys):
    (temp_workdir / "config" / "import.yml").write_text(
        "imports:\n  bp:\n    workbook: ./data/BP.xlsx\n", encoding="utf-8"
    )
    code = cli_main(["checkup", "--dry-run"])
    assert code == 1
    assert "ERROR processing: import not configured: checkup" in capsys.readouterr().out


def test_unreadable_workbook_is_partial_failure(write_config, clinic_workbooks, capsys, temp_workdir: Path):
    clinic_workbooks["checkup"].unlink()
    code = cli_main(["--dry-run"])
    out = capsys.readouterr().out
    assert code == 2
    assert "SUMMARY imports=3 success=2 failed=1" in out
    assert list((temp_workdir / "logs").glob("errors-*.log"))


def test_live_mode_uses_postgres_sink(write_config, clinic_workbooks, capsys):
    conn = MagicMock()
    with patch("clinic_import.cli.__main__.psycopg2.connect", return_value=conn) as connect, \
            patch("clinic_import.db.batch_insert.execute_values") as ev:
        code = cli_main([])
    out = capsys.readouterr().out
    assert code == 0
    assert connect.call_args.args[0] == "host=localhost port=5432 user=appuser dbname=clinic password=secret"
    assert ev.call_count == 3
    assert conn.commit.call_count == 3
    conn.close.assert_called_once()
    assert "mode=live" in out


def test_connection_failure_is_fatal(write_config, clinic_workbooks, capsys):
    with patch(
        "clinic_import.cli.__main__.psycopg2.connect",
        side_effect=psycopg2.OperationalError("could not connect to server\n"),
    ):
        code = cli_main([])
    assert code == 1
    assert "ERROR database connection failed: could not connect to server" in capsys.readouterr().out


def test_debug_flag(write_config, clinic_workbooks, capsys):
    cli_main(["--dry-run", "--debug"])
    out = capsys.readouterr().out
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG dry-run insert table=bp_logs rows=2" in out


def test_inspect_prints_layout(write_config, clinic_workbooks, capsys):
    code = cli_main(["inpatient", "--inspect"])
    out = capsys.readouterr().out
    assert code == 0
    assert "IMPORT: inpatient" in out
    assert "symptom_columns=['Fever', 'Cough', 'Headache']" in out
    assert "rows_read=2 accepted=1 dropped=1" in out


def test_env_file_values_are_used(write_config, clinic_workbooks, temp_workdir: Path, monkeypatch):
    # .env overrides the process environment
    monkeypatch.setenv("DATABASE_URL", "postgresql:///stale")
    (temp_workdir / ".env").write_text("DATABASE_URL=postgresql://u:p@db/clinic\n", encoding="utf-8")
    with patch("clinic_import.cli.__main__.psycopg2.connect", return_value=MagicMock()) as connect, \
            patch("clinic_import.db.batch_insert.execute_values"):
        cli_main([])
    assert connect.call_args.args[0] == "postgresql://u:p@db/clinic"


def test_resolve_dsn_precedence(monkeypatch):
    cfg = DatabaseConfig(host="cfg-host", port=6543, user="cfg", database="cfgdb", dsn=None)
    assert resolve_dsn(cfg) == "host=cfg-host port=6543 user=cfg dbname=cfgdb"
    monkeypatch.setenv("PGHOST", "env-host")
    assert resolve_dsn(cfg).startswith("host=env-host port=6543")
    assert resolve_dsn(DatabaseConfig(dsn="postgresql:///fromcfg")) == "postgresql:///fromcfg"
    monkeypatch.setenv("DATABASE_URL", "postgresql:///fromenv")
    assert resolve_dsn(DatabaseConfig(dsn="postgresql:///fromcfg")) == "postgresql:///fromenv"
