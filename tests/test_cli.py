"""Tests for the command line entry points."""

from pathlib import Path

import pytest

from cng_tools.cli import object_storage_backup, wait_for_deps
from cng_tools.checks import PostgreSQLProbe, RedisProbe


@pytest.fixture
def probe_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the readiness settings at an empty config directory."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("CONFIG_DIRECTORY", str(tmp_path))
    monkeypatch.setenv("WAIT_FOR_TIMEOUT", "1")
    monkeypatch.setenv("SLEEP_DURATION", "0")
    monkeypatch.delenv("DATABASE_FILE", raising=False)
    monkeypatch.delenv("SCHEMA_VERSION", raising=False)
    monkeypatch.delenv("BYPASS_SCHEMA_VERSION", raising=False)
    return tmp_path


class TestWaitForDeps:
    """Tests for wait-for-deps."""

    def test_missing_database_file(self, probe_env):
        assert wait_for_deps.main(["postgresql"]) == 1

    def test_invalid_timeout(self, probe_env, monkeypatch):
        monkeypatch.setenv("WAIT_FOR_TIMEOUT", "never")
        assert wait_for_deps.main(["redis"]) == 1

    def test_no_redis_configs(self, probe_env):
        assert wait_for_deps.main(["redis"]) == 1

    def test_ready_postgresql(self, probe_env, monkeypatch):
        (probe_env / "database.yml").write_text(
            "production:\n  main:\n    adapter: postgresql\n    database: gitlab\n"
        )
        seen = {}

        def fake_run(probe, max_attempts, sleep_interval, logger=None):
            seen["probe"] = probe
            seen["bounds"] = (max_attempts, sleep_interval)
            return True

        monkeypatch.setattr(wait_for_deps, "run", fake_run)

        assert wait_for_deps.main(["postgresql"]) == 0
        assert isinstance(seen["probe"], PostgreSQLProbe)
        assert seen["bounds"] == (1, 0)

    def test_not_ready_redis(self, probe_env, monkeypatch):
        monkeypatch.setattr(wait_for_deps, "run", lambda probe, *args, **kwargs: False)

        assert wait_for_deps.main(["redis"]) == 1

    def test_build_probe_redis(self, probe_env, recording_logger):
        settings = wait_for_deps.ProbeSettings.from_env(env={"CONFIG_DIRECTORY": str(probe_env)})

        probe = wait_for_deps.build_probe("redis", settings, recording_logger)

        assert isinstance(probe, RedisProbe)
        assert probe.config_directory == probe_env

    def test_unknown_dependency(self):
        with pytest.raises(SystemExit):
            wait_for_deps.main(["mysql"])


class TestObjectStorageBackup:
    """Tests for object-storage-backup."""

    def test_restore_missing_archive(self, tmp_path, monkeypatch, capsys):
        monkeypatch.delenv("BACKUP_STAGING_DIR", raising=False)

        code = object_storage_backup.main([
            "restore",
            "--name", "uploads",
            "--tar-path", str(tmp_path / "uploads.tar.gz"),
            "--bucket", "gitlab-uploads",
            "--staging-dir", str(tmp_path / "staging"),
        ])

        assert code == 1
        assert "restore of uploads failed" in capsys.readouterr().err

    def test_invalid_name(self, tmp_path):
        code = object_storage_backup.main([
            "backup",
            "--name", "../etc",
            "--tar-path", str(tmp_path / "x.tar.gz"),
            "--bucket", "b",
        ])

        assert code == 2

    def test_gcs_with_s3_tool_rejected(self, tmp_path):
        code = object_storage_backup.main([
            "backup",
            "--name", "uploads",
            "--tar-path", str(tmp_path / "x.tar.gz"),
            "--bucket", "b",
            "--backend", "gcs",
            "--s3-tool", "awscli",
        ])

        assert code == 2

    def test_archive_inside_staging_dir_rejected(self, tmp_path, monkeypatch):
        """Rejected before any storage command can run."""
        ran = []
        monkeypatch.setattr(object_storage_backup, "ObjectStorageBackup", lambda *a, **k: ran.append(a))

        code = object_storage_backup.main([
            "restore",
            "--name", "backups",
            "--tar-path", str(tmp_path / "staging" / "backups" / "backups.tar.gz"),
            "--bucket", "gitlab-backups",
            "--staging-dir", str(tmp_path / "staging"),
        ])

        assert code == 2
        assert ran == []

    def test_missing_action(self):
        with pytest.raises(SystemExit):
            object_storage_backup.main(["--name", "uploads"])
