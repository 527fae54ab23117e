"""Command lines for each storage backend/tool combination.

``storage_commands_for`` picks the variant once; the archiver then only
calls methods on it and never looks at backend or tool names again.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from cng_tools.backup.config import (
    DEFAULT_EXCLUDE_GLOB,
    DEFAULT_EXCLUDE_REGEXP,
    S3Tool,
    StorageBackend,
)
from cng_tools.exceptions import ConfigurationError


class StorageCommands(ABC):
    """Command templates for one storage CLI."""

    scheme: str = ""

    def __init__(self, exclude: str):
        self.exclude = exclude

    def uri(self, bucket: str, path: str = "") -> str:
        return f"{self.scheme}://{bucket}/{path}" if path else f"{self.scheme}://{bucket}"

    @abstractmethod
    def check_bucket(self, bucket: str) -> List[str]:
        """Exits non-zero when the bucket does not exist."""

    @abstractmethod
    def sync_to_local(self, bucket: str, destination: Path) -> List[str]:
        """Mirror the bucket into ``destination``, skipping excluded objects."""

    @abstractmethod
    def sync_existing(self, bucket: str, staging_bucket: str, prefix: str) -> List[str]:
        """Copy the bucket under ``staging_bucket/prefix/``."""

    def list_objects(self, bucket: str) -> Optional[List[str]]:
        """Listing run before cleanup; None when cleanup copes with empty buckets."""
        return None

    @abstractmethod
    def cleanup(self, bucket: str) -> List[str]:
        """Recursively delete every object in the bucket."""

    @abstractmethod
    def upload(self, source: Path, bucket: str, dir_name: str) -> List[str]:
        """Sync a local directory into ``bucket/dir_name``."""


class S3cmdCommands(StorageCommands):
    scheme = "s3"

    def check_bucket(self, bucket: str) -> List[str]:
        return ["s3cmd", "--limit=1", "ls", self.uri(bucket)]

    def sync_to_local(self, bucket: str, destination: Path) -> List[str]:
        return [
            "s3cmd", "--stop-on-error", "--delete-removed", "--exclude", self.exclude,
            "sync", f"{self.uri(bucket)}/", f"{destination}/",
        ]

    def sync_existing(self, bucket: str, staging_bucket: str, prefix: str) -> List[str]:
        return ["s3cmd", "sync", self.uri(bucket), f"{self.uri(staging_bucket, prefix)}/"]

    def cleanup(self, bucket: str) -> List[str]:
        return ["s3cmd", "--stop-on-error", "del", "--force", "--recursive", self.uri(bucket)]

    def upload(self, source: Path, bucket: str, dir_name: str) -> List[str]:
        return ["s3cmd", "--stop-on-error", "sync", f"{source}/", f"{self.uri(bucket, dir_name)}/"]


class AwsCliCommands(StorageCommands):
    scheme = "s3"

    def check_bucket(self, bucket: str) -> List[str]:
        return ["aws", "s3api", "head-bucket", "--bucket", bucket]

    def sync_to_local(self, bucket: str, destination: Path) -> List[str]:
        return [
            "aws", "s3", "sync", "--delete", "--exclude", self.exclude,
            f"{self.uri(bucket)}/", f"{destination}/",
        ]

    def sync_existing(self, bucket: str, staging_bucket: str, prefix: str) -> List[str]:
        return ["aws", "s3", "sync", self.uri(bucket), f"{self.uri(staging_bucket, prefix)}/"]

    def cleanup(self, bucket: str) -> List[str]:
        return ["aws", "s3", "rm", "--recursive", self.uri(bucket)]

    def upload(self, source: Path, bucket: str, dir_name: str) -> List[str]:
        return ["aws", "s3", "sync", f"{source}/", f"{self.uri(bucket, dir_name)}/"]


class GsutilCommands(StorageCommands):
    scheme = "gs"

    def check_bucket(self, bucket: str) -> List[str]:
        return ["gsutil", "ls", self.uri(bucket)]

    def sync_to_local(self, bucket: str, destination: Path) -> List[str]:
        return ["gsutil", "-m", "rsync", "-d", "-x", self.exclude, "-r", self.uri(bucket), str(destination)]

    def sync_existing(self, bucket: str, staging_bucket: str, prefix: str) -> List[str]:
        return ["gsutil", "-m", "rsync", "-r", self.uri(bucket), f"{self.uri(staging_bucket, prefix)}/"]

    def list_objects(self, bucket: str) -> Optional[List[str]]:
        # gsutil rm fails on an empty prefix
        return ["gsutil", "ls", f"{self.uri(bucket)}/"]

    def cleanup(self, bucket: str) -> List[str]:
        return ["gsutil", "rm", "-f", "-r", self.uri(bucket, "*")]

    def upload(self, source: Path, bucket: str, dir_name: str) -> List[str]:
        return ["gsutil", "-m", "rsync", "-r", f"{source}/", self.uri(bucket, dir_name)]


def storage_commands_for(
    backend: StorageBackend,
    s3_tool: Optional[S3Tool] = None,
    exclude_glob: str = DEFAULT_EXCLUDE_GLOB,
    exclude_regexp: str = DEFAULT_EXCLUDE_REGEXP,
) -> StorageCommands:
    """Select the command set for a (backend, tool) pair."""
    if backend is StorageBackend.GCS and s3_tool is None:
        return GsutilCommands(exclude_regexp)
    if backend is StorageBackend.S3:
        if s3_tool in (None, S3Tool.S3CMD):
            return S3cmdCommands(exclude_glob)
        if s3_tool is S3Tool.AWSCLI:
            return AwsCliCommands(exclude_glob)
    raise ConfigurationError(
        "INVALID_STORAGE_TOOL",
        f"Unsupported storage combination: backend={backend}, tool={s3_tool}",
        {"backend": str(backend), "tool": str(s3_tool)},
    )


def archive_command(tar_path: Path, source_dir: Path, rsyncable: bool = False) -> List[str]:
    """tar + gzip of the contents of ``source_dir``."""
    gzip_cmd = "gzip --rsyncable" if rsyncable else "gzip"
    return ["tar", "-cf", str(tar_path), "-I", gzip_cmd, "-C", str(source_dir), "."]


def extract_command(tar_path: Path, destination: Path) -> List[str]:
    return ["tar", "-xf", str(tar_path), "-C", str(destination)]
