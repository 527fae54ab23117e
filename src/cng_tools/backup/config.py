"""Bucket backup/restore configuration

A BucketSpec describes one object storage bucket and where its tar archive
lives locally. Environment overrides follow the variables the backup
utility already exports (GZIP_RSYNCABLE, BACKUP_STAGING_DIR).
"""

from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from cng_tools.config import EnvLoader

DEFAULT_STAGING_ROOT = Path("/srv/gitlab/tmp")
DEFAULT_EXCLUDE_GLOB = "tmp/builds/*"
DEFAULT_EXCLUDE_REGEXP = "tmp/builds/.*$"


class StorageBackend(str, Enum):
    """Object storage flavour"""

    S3 = "s3"
    GCS = "gcs"


class S3Tool(str, Enum):
    """CLI used to talk to S3-compatible storage"""

    S3CMD = "s3cmd"
    AWSCLI = "awscli"


class BucketSpec(BaseModel):
    """One bucket taking part in a backup or restore

    ``s3_tool`` only applies to the S3 backend, where it defaults to s3cmd.
    """

    name: str = Field(
        ...,
        min_length=1,
        description="Logical name (e.g. 'uploads'), used for the staging directory"
    )
    local_tar_path: Path = Field(
        ...,
        description="Where the tar archive is written (backup) or read (restore)"
    )
    remote_bucket: str = Field(
        ...,
        min_length=1,
        description="Bucket being backed up or restored"
    )
    staging_bucket: str = Field(
        default="tmp",
        min_length=1,
        description="Bucket receiving a snapshot of the remote bucket before a restore"
    )
    backend: StorageBackend = Field(
        default=StorageBackend.S3,
        description="Storage backend: s3 or gcs"
    )
    s3_tool: Optional[S3Tool] = Field(
        default=None,
        description="S3 client: s3cmd or awscli"
    )
    staging_root: Path = Field(
        default=DEFAULT_STAGING_ROOT,
        description="Parent of the local staging/extraction directories"
    )
    gzip_rsyncable: bool = Field(
        default=False,
        description="Compress with gzip --rsyncable"
    )
    exclude_glob: str = Field(
        default=DEFAULT_EXCLUDE_GLOB,
        description="Objects skipped by S3 syncs (glob)"
    )
    exclude_regexp: str = Field(
        default=DEFAULT_EXCLUDE_REGEXP,
        description="Objects skipped by gsutil rsync (regular expression)"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """The name becomes a directory component"""
        if "/" in v or v in (".", ".."):
            raise ValueError(f"Invalid bucket name '{v}': must be a single path component")
        return v

    @model_validator(mode="after")
    def resolve_tool(self) -> "BucketSpec":
        """Only s3+s3cmd, s3+awscli and gcs are valid combinations"""
        if self.backend is StorageBackend.GCS:
            if self.s3_tool is not None:
                raise ValueError("s3_tool cannot be used with the gcs backend")
        elif self.s3_tool is None:
            self.s3_tool = S3Tool.S3CMD
        return self

    @model_validator(mode="after")
    def archive_outside_staging(self) -> "BucketSpec":
        """The staging directory is wiped before extraction and tarred on backup"""
        archive = self.local_tar_path.resolve()
        staging = self.staging_dir.resolve()
        if archive == staging or staging in archive.parents:
            raise ValueError(
                f"local_tar_path {self.local_tar_path} must not be inside the staging "
                f"directory {self.staging_dir}"
            )
        return self

    @property
    def staging_dir(self) -> Path:
        """Local directory mirroring the bucket (backup) or the archive (restore)"""
        return self.staging_root / self.name

    @classmethod
    def from_env(
        cls,
        env: Optional[Mapping[str, str]] = None,
        **fields: Any,
    ) -> "BucketSpec":
        """Create a spec, filling unset fields from environment variables

        Environment variables:
            GZIP_RSYNCABLE: "yes" enables rsyncable compression
            BACKUP_STAGING_DIR: Parent directory for staging data
        """
        env = EnvLoader().load() if env is None else env
        fields = {k: v for k, v in fields.items() if v is not None}
        fields.setdefault("gzip_rsyncable", env.get("GZIP_RSYNCABLE", "no") == "yes")
        if env.get("BACKUP_STAGING_DIR"):
            fields.setdefault("staging_root", Path(env["BACKUP_STAGING_DIR"]))
        return cls(**fields)
