"""Tests for the sqlport CLI, run against SQLite profiles."""

import textwrap
from pathlib import Path
from unittest.mock import patch

import pytest

from sqlport.cli import main
from sqlport.factory import read_profile_lock

DB_TOML = textwrap.dedent("""\
    [profiles.source]
    provider = "sqlite"
    description = "Seeded source database"
    path = "source.sqlite"

    [profiles.target]
    provider = "sqlite"
    path = "target.sqlite"
""")

SEED_DUMP = textwrap.dedent("""\
    -- seed
    CREATE TABLE items (id INTEGER PRIMARY KEY, label TEXT);
    INSERT INTO items VALUES (1,'one');
    INSERT INTO items VALUES (2,'two;
    lines');
""")


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DB_PROFILE", raising=False)
    monkeypatch.delenv("DB_PASSWORD", raising=False)
    (tmp_path / "db.toml").write_text(DB_TOML)
    (tmp_path / "seed.sql").write_text(SEED_DUMP)
    return tmp_path


class TestParser:
    """Argument parsing and dispatch."""

    def test_env_prefix_is_parsed(self):
        with patch("sqlport.cli.cmd_status", return_value=0) as mock_status:
            assert main(["--env-prefix", "APP_", "status"]) == 0
        assert mock_status.call_args[0][0].env_prefix == "APP_"

    def test_command_required(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_structure_and_data_only_are_exclusive(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["dump", "--structure-only", "--data-only"])
        assert exc_info.value.code == 2


class TestLocalCommands:
    """profiles, status and check read local files only."""

    def test_profiles(self, workdir: Path, capsys):
        assert main(["profiles"]) == 0
        out = capsys.readouterr().out
        assert "source" in out
        assert "target" in out

    def test_profiles_without_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        assert main(["profiles"]) == 1

    def test_status_without_profile(self, workdir: Path, capsys):
        assert main(["status"]) == 0
        assert "No connected profile" in capsys.readouterr().out

    def test_check(self, workdir: Path, capsys):
        assert main(["check", "seed.sql"]) == 0
        assert "3 statement(s)" in capsys.readouterr().out

    def test_check_strict_rejects_unterminated_tail(self, workdir: Path):
        (workdir / "broken.sql").write_text("SELECT 1;\nINSERT INTO items VALUES (3\n")
        assert main(["check", "broken.sql"]) == 0
        assert main(["check", "broken.sql", "--strict"]) == 1

    def test_check_missing_file(self, workdir: Path):
        assert main(["check", "nope.sql"]) == 1


class TestDatabaseCommands:
    """connect, restore and dump against SQLite files."""

    def test_connect_writes_lock(self, workdir: Path):
        assert main(["connect", "--profile", "source"]) == 0
        assert read_profile_lock() == "source"
        assert (workdir / "source.sqlite").exists()

    def test_connect_unknown_profile(self, workdir: Path):
        assert main(["connect", "--profile", "nope"]) == 1
        assert read_profile_lock() is None

    def test_restore_then_dump(self, workdir: Path):
        assert main(["restore", "seed.sql", "--profile", "source", "--yes"]) == 0
        assert main(["dump", "--profile", "source", "-o", "out.sql"]) == 0

        dump = (workdir / "out.sql").read_text()
        assert "INSERT INTO `items` VALUES (1,'one');" in dump

        assert main(["restore", "out.sql", "--profile", "target", "--yes"]) == 0

    def test_dump_default_location(self, workdir: Path):
        assert main(["restore", "seed.sql", "--profile", "source", "--yes"]) == 0
        assert main(["dump", "--profile", "source", "--structure-only"]) == 0

        (dump_file,) = (workdir / "dumps").glob("dump-*.sql")
        assert "INSERT INTO" not in dump_file.read_text()

    def test_restore_reports_errors(self, workdir: Path, capsys):
        (workdir / "bad.sql").write_text("INSERT INTO missing VALUES (1);\n")

        assert main(["restore", "bad.sql", "--profile", "target", "--yes"]) == 1
        assert "Error in line 1" in capsys.readouterr().out

    def test_restore_cancelled(self, workdir: Path):
        with patch("sqlport.cli.console.input", return_value="n"):
            assert main(["restore", "seed.sql", "--profile", "source"]) == 0
        assert not (workdir / "source.sqlite").exists()
