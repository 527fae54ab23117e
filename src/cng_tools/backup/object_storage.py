"""Backup and restore of one object storage bucket through a tar archive.

Backup:  bucket --sync--> staging dir --tar--> local archive
Restore: archive check, snapshot bucket to the staging bucket, empty the
         bucket, untar, upload each top-level entry

Any failing storage or tar command raises BackupAbortError; nothing is
retried because a half-applied sync leaves the bucket in an unknown state.
"""

import shutil
import time
from pathlib import Path
from typing import Callable, List, NoReturn, Optional

from cng_tools.backup.commands import archive_command, extract_command, storage_commands_for
from cng_tools.backup.config import BucketSpec
from cng_tools.backup.runner import CommandResult, CommandRunner
from cng_tools.backup.verify import ArchiveVerifier
from cng_tools.exceptions import BackupAbortError
from cng_tools.logger import Logger, get_logger


class ObjectStorageBackup:
    """Backup/restore orchestrator for a single bucket"""

    def __init__(
        self,
        spec: BucketSpec,
        runner: Optional[CommandRunner] = None,
        verifier: Optional[ArchiveVerifier] = None,
        logger: Optional[Logger] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.spec = spec
        self.logger = logger or get_logger()
        self.runner = runner or CommandRunner(self.logger)
        self.verifier = verifier or ArchiveVerifier()
        self.commands = storage_commands_for(
            spec.backend, spec.s3_tool, spec.exclude_glob, spec.exclude_regexp
        )
        self._clock = clock

    @property
    def name(self) -> str:
        return self.spec.name

    def failure_abort(self, action: str, output: str) -> NoReturn:
        self.logger.error(f"[Error] {output.strip()}")
        raise BackupAbortError(action, self.name, output)

    def _run_or_abort(self, action: str, command: List[str]) -> CommandResult:
        result = self.runner.run(command)
        if not result.success:
            self.failure_abort(action, result.output)
        return result

    def backup(self) -> Optional[Path]:
        """Dump the remote bucket into ``spec.local_tar_path``

        Returns:
            The archive path, or None when the bucket is missing or empty
        """
        bucket = self.spec.remote_bucket
        if not self.runner.run(self.commands.check_bucket(bucket)).success:
            self.logger.info(f"Bucket not found: {bucket}. Skipping backup of {self.name} ...")
            return None

        self.logger.info(f"Dumping {self.name} ...")

        # gsutil requires the destination to exist
        staging_dir = self.spec.staging_dir
        staging_dir.mkdir(parents=True, exist_ok=True, mode=0o700)

        self._run_or_abort("sync", self.commands.sync_to_local(bucket, staging_dir))

        if not any(staging_dir.iterdir()):
            self.logger.info("empty")
            return None

        self.spec.local_tar_path.parent.mkdir(parents=True, exist_ok=True)
        self._run_or_abort(
            "archive",
            archive_command(self.spec.local_tar_path, staging_dir, self.spec.gzip_rsyncable),
        )

        self.logger.info("done")
        return self.spec.local_tar_path

    def restore(self) -> None:
        """Replace the remote bucket contents with the local archive"""
        self.logger.info(f"Restoring {self.name} ...")

        self.verify_local_archive()
        self.backup_existing()
        self.cleanup()
        self.restore_from_backup()

        self.logger.info("done")

    def verify_local_archive(self) -> None:
        ok, error = self.verifier.verify_archive(self.spec.local_tar_path)
        if not ok:
            self.failure_abort("restore", error or f"{self.spec.local_tar_path} not usable")

    def backup_existing(self) -> str:
        """Snapshot the current bucket under the staging bucket

        Returns:
            The snapshot prefix, ``<name>.<unix time>``
        """
        prefix = f"{self.name}.{int(self._clock())}"
        self._run_or_abort(
            "sync existing",
            self.commands.sync_existing(self.spec.remote_bucket, self.spec.staging_bucket, prefix),
        )
        self.logger.info(f"Existing {self.name} saved to {self.spec.staging_bucket}/{prefix}")
        return prefix

    def cleanup(self) -> None:
        bucket = self.spec.remote_bucket
        listing = self.commands.list_objects(bucket)
        if listing is not None:
            result = self._run_or_abort("list objects", listing)
            if not result.output.strip():
                return

        self._run_or_abort("bucket cleanup", self.commands.cleanup(bucket))

    def restore_from_backup(self) -> None:
        extract_dir = self.spec.staging_dir
        if extract_dir.exists():
            shutil.rmtree(extract_dir)
        extract_dir.mkdir(parents=True, mode=0o700)

        self._run_or_abort("un-archive", extract_command(self.spec.local_tar_path, extract_dir))

        for entry in sorted(extract_dir.iterdir()):
            self.upload_to_object_storage(entry)

    def upload_to_object_storage(self, source_path: Path) -> None:
        self._run_or_abort(
            "upload",
            self.commands.upload(source_path, self.spec.remote_bucket, source_path.name),
        )
