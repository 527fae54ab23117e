"""Object storage bucket backup and restore

Usage:
    from cng_tools.backup import BucketSpec, ObjectStorageBackup

    spec = BucketSpec.from_env(
        name="uploads",
        local_tar_path="/srv/gitlab/tmp/backups/uploads.tar.gz",
        remote_bucket="gitlab-uploads",
    )
    ObjectStorageBackup(spec).backup()
"""

from cng_tools.backup.commands import (
    AwsCliCommands,
    GsutilCommands,
    S3cmdCommands,
    StorageCommands,
    archive_command,
    extract_command,
    storage_commands_for,
)
from cng_tools.backup.config import BucketSpec, S3Tool, StorageBackend
from cng_tools.backup.object_storage import ObjectStorageBackup
from cng_tools.backup.runner import CommandResult, CommandRunner
from cng_tools.backup.verify import ArchiveVerifier

__all__ = [
    "BucketSpec",
    "StorageBackend",
    "S3Tool",
    "StorageCommands",
    "S3cmdCommands",
    "AwsCliCommands",
    "GsutilCommands",
    "storage_commands_for",
    "archive_command",
    "extract_command",
    "CommandRunner",
    "CommandResult",
    "ArchiveVerifier",
    "ObjectStorageBackup",
]
