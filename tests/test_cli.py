"""Tests for the tindatrack CLI."""

import inspect
import json
from unittest.mock import patch

import pytest

from tindatrack.cli import build_parser, cmd_profiles, main
from tindatrack.cli.backup import cmd_backup, cmd_restore, cmd_validate


@pytest.fixture
def db(tmp_path) -> str:
    path = str(tmp_path / "store.db")
    assert main(["--db", path, "init"]) == 0
    return path


def _only_backup(directory) -> str:
    files = list(directory.glob("*.json"))
    assert len(files) == 1
    return str(files[0])


class TestParser:
    def test_prog(self):
        assert build_parser().prog == "tindatrack"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_global_options(self):
        args = build_parser().parse_args(
            ["--config", "x.toml", "--profile", "local", "--env-prefix", "APP_", "-v", "history"]
        )
        assert args.config == "x.toml"
        assert args.profile == "local"
        assert args.env_prefix == "APP_"
        assert args.verbose

    def test_backup_defaults(self):
        args = build_parser().parse_args(["backup"])
        assert args.label == "Manual Backup"
        assert args.actor_name == "System"
        assert args.func is cmd_backup

    def test_auto_backup_requires_user(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["auto-backup"])

    def test_dispatches_to_handler(self):
        with patch("tindatrack.cli.cmd_profiles", return_value=0) as mock_profiles:
            assert main(["--env-prefix", "APP_", "profiles"]) == 0
        assert mock_profiles.call_args[0][0].env_prefix == "APP_"


class TestAsyncWrapping:
    """Store-touching commands wrap their async implementation."""

    @pytest.mark.parametrize("func", [cmd_backup, cmd_restore])
    def test_calls_asyncio_run(self, func):
        assert "asyncio.run" in inspect.getsource(func)

    @pytest.mark.parametrize("func", [cmd_validate, cmd_profiles])
    def test_offline_commands_are_sync(self, func):
        assert "asyncio.run" not in inspect.getsource(func)


class TestInitAndStatus:
    def test_status_after_init(self, db, capsys):
        assert main(["--db", db, "status"]) == 0
        out = capsys.readouterr().out
        assert "valid" in out
        assert "never" in out

    def test_status_before_init(self, tmp_path, capsys):
        assert main(["--db", str(tmp_path / "fresh.db"), "status"]) == 1
        assert "Missing tables" in capsys.readouterr().out

    def test_init_twice(self, db):
        assert main(["--db", db, "init"]) == 0


class TestBackupCommands:
    def test_backup_validate_restore(self, db, tmp_path, capsys):
        out_dir = tmp_path / "backups"
        assert main(["--db", db, "backup", "--label", "Monthly", "--actor-id", "1",
                     "--actor-name", "alice", "--output-dir", str(out_dir)]) == 0
        path = _only_backup(out_dir)
        assert "TindaTrack_Backup_Monthly_" in path

        assert main(["validate", path]) == 0
        assert main(["--db", db, "restore", path, "--yes", "--actor-name", "alice"]) == 0

        capsys.readouterr()
        assert main(["--db", db, "history", "--limit", "5"]) == 0
        assert "Backup History" in capsys.readouterr().out

    def test_blank_label_fails(self, db, tmp_path):
        assert main(["--db", db, "backup", "--label", " ", "--output-dir", str(tmp_path / "b")]) == 1
        assert not (tmp_path / "b").exists()

    def test_tampered_file_rejected(self, db, tmp_path, capsys):
        out_dir = tmp_path / "backups"
        main(["--db", db, "backup", "--output-dir", str(out_dir)])
        path = _only_backup(out_dir)

        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        raw["createdByName"] = "mallory"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(raw, f)

        assert main(["validate", path]) == 1
        assert "checksum" in capsys.readouterr().out
        assert main(["--db", db, "restore", path, "--yes"]) == 1

    def test_validate_other_schema_version(self, db, tmp_path):
        out_dir = tmp_path / "backups"
        main(["--db", db, "backup", "--output-dir", str(out_dir)])
        assert main(["validate", _only_backup(out_dir), "--schema-version", "2"]) == 1

    def test_restore_missing_file(self, db, tmp_path):
        assert main(["--db", db, "restore", str(tmp_path / "nope.json"), "--yes"]) == 1

    def test_restore_cancelled(self, db, tmp_path):
        out_dir = tmp_path / "backups"
        main(["--db", db, "backup", "--output-dir", str(out_dir)])
        path = _only_backup(out_dir)

        with patch("tindatrack.cli.backup.console.input", return_value="n"):
            with patch("tindatrack.cli.backup._async_restore") as mock_restore:
                assert main(["--db", db, "restore", path]) == 0
        mock_restore.assert_not_called()

    def test_history_empty(self, db, capsys):
        assert main(["--db", db, "history"]) == 0
        assert "No backup history" in capsys.readouterr().out


class TestAutoBackupCommand:
    def test_owner(self, db, tmp_path):
        out_dir = tmp_path / "backups"
        assert main(["--db", db, "auto-backup", "--user-id", "1", "--username", "alice",
                     "--role", "owner", "--output-dir", str(out_dir)]) == 0
        assert "Automatic_Daily_Backup" in _only_backup(out_dir)

    def test_staff_skipped(self, db, tmp_path, capsys):
        out_dir = tmp_path / "backups"
        assert main(["--db", db, "auto-backup", "--user-id", "2", "--role", "staff",
                     "--output-dir", str(out_dir)]) == 0
        assert "not an owner" in capsys.readouterr().out
        assert not out_dir.exists()


class TestConfigFile:
    def test_profiles_listed(self, tmp_path, capsys, monkeypatch):
        monkeypatch.delenv("TINDATRACK_PROFILE", raising=False)
        config = tmp_path / "tindatrack.toml"
        config.write_text(
            f'[profiles.local]\nurl = "{tmp_path / "store.db"}"\ndescription = "Counter PC"\n'
        )
        assert main(["--config", str(config), "profiles"]) == 0
        out = capsys.readouterr().out
        assert "local" in out
        assert "active profile" in out

    def test_backup_uses_config_backup_dir(self, tmp_path, monkeypatch):
        monkeypatch.delenv("TINDATRACK_PROFILE", raising=False)
        backup_dir = tmp_path / "from-config"
        config = tmp_path / "tindatrack.toml"
        config.write_text(
            f'app_name = "Nena"\nbackup_dir = "{backup_dir}"\n'
            f'[profiles.local]\nurl = "{tmp_path / "store.db"}"\n'
        )
        assert main(["--config", str(config), "init"]) == 0
        assert main(["--config", str(config), "backup", "--label", "Weekly"]) == 0
        assert _only_backup(backup_dir).endswith(".json")
        assert "Nena_Backup_Weekly_" in _only_backup(backup_dir)

    def test_missing_config(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "missing.toml"), "profiles"]) == 1
        assert "Config file not found" in capsys.readouterr().out

    @pytest.mark.parametrize("command", [["status"], ["history"], ["backup", "--label", "Weekly"]])
    def test_memory_profile_rejected(self, tmp_path, capsys, monkeypatch, command):
        monkeypatch.delenv("TINDATRACK_PROFILE", raising=False)
        config = tmp_path / "tindatrack.toml"
        config.write_text('[profiles.scratch]\nurl = ""\nprovider = "memory"\n')

        assert main(["--config", str(config), *command]) == 1
        assert "in-memory provider" in capsys.readouterr().out
