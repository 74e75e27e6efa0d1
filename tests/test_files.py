"""Tests for writing and reading backup files."""

from unittest.mock import patch

import pytest

from tindatrack.backup.files import read_backup_file, write_backup_file
from tindatrack.backup.models import BackupErrorKind, BackupResult


def _result(**overrides) -> BackupResult:
    data = {
        "success": True,
        "document": '{"schemaVersion": 1, "note": "Piña"}',
        "file_name": "TindaTrack_Backup_Test_1767225600000.json",
        "size_bytes": 37,
        "checksum": "abc",
    }
    data.update(overrides)
    return BackupResult(**data)


class TestWriteBackupFile:
    def test_writes_document(self, tmp_path):
        path = write_backup_file(_result(), tmp_path)
        assert path == tmp_path / "TindaTrack_Backup_Test_1767225600000.json"
        assert path.read_text(encoding="utf-8") == _result().document

    def test_creates_directory(self, tmp_path):
        path = write_backup_file(_result(), tmp_path / "nested" / "backups")
        assert path.exists()

    def test_no_temp_file_left(self, tmp_path):
        write_backup_file(_result(), tmp_path)
        assert [p.name for p in tmp_path.iterdir()] == ["TindaTrack_Backup_Test_1767225600000.json"]

    def test_failed_result_rejected(self, tmp_path):
        failed = BackupResult(success=False, error_kind=BackupErrorKind.EMPTY_LABEL, error="x")
        with pytest.raises(ValueError):
            write_backup_file(failed, tmp_path)
        assert list(tmp_path.iterdir()) == []

    def test_failed_write_leaves_nothing(self, tmp_path):
        with patch("tindatrack.backup.files.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError):
                write_backup_file(_result(), tmp_path)
        assert list(tmp_path.iterdir()) == []


class TestReadBackupFile:
    def test_reads_utf8(self, tmp_path):
        path = write_backup_file(_result(), tmp_path)
        assert read_backup_file(path) == _result().document

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_backup_file(tmp_path / "missing.json")
