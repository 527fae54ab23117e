#!/usr/bin/env python3
"""Back up an object storage bucket to a tar archive, or restore it.

USAGE:
    object-storage-backup backup  --name uploads --tar-path /backups/uploads.tar.gz \\
        --bucket gitlab-uploads
    object-storage-backup restore --name uploads --tar-path /backups/uploads.tar.gz \\
        --bucket gitlab-uploads --tmp-bucket tmp --backend gcs

ENVIRONMENT VARIABLES:
    GZIP_RSYNCABLE       "yes" compresses with gzip --rsyncable
    BACKUP_STAGING_DIR   Parent of the local staging directories (default: /srv/gitlab/tmp)
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from cng_tools.backup import BucketSpec, ObjectStorageBackup, S3Tool, StorageBackend
from cng_tools.exceptions import BackupAbortError
from cng_tools.logger import get_logger


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="object-storage-backup",
        description="Back up or restore an object storage bucket",
    )
    parser.add_argument("action", choices=["backup", "restore"])
    parser.add_argument("--name", required=True, help="Logical name, e.g. uploads")
    parser.add_argument("--tar-path", required=True, type=Path, help="Local archive path")
    parser.add_argument("--bucket", required=True, help="Remote bucket name")
    parser.add_argument("--tmp-bucket", default="tmp", help="Bucket receiving pre-restore snapshots")
    parser.add_argument(
        "--backend", choices=[b.value for b in StorageBackend], default=StorageBackend.S3.value
    )
    parser.add_argument("--s3-tool", choices=[t.value for t in S3Tool], default=None)
    parser.add_argument("--staging-dir", type=Path, default=None, help="Staging root directory")
    args = parser.parse_args(argv)

    logger = get_logger()
    try:
        spec = BucketSpec.from_env(
            name=args.name,
            local_tar_path=args.tar_path,
            remote_bucket=args.bucket,
            staging_bucket=args.tmp_bucket,
            backend=args.backend,
            s3_tool=args.s3_tool,
            staging_root=args.staging_dir,
        )
    except PydanticValidationError as e:
        logger.error(f"Invalid bucket configuration: {e}")
        return 2

    archiver = ObjectStorageBackup(spec, logger=logger)
    try:
        if args.action == "backup":
            archiver.backup()
        else:
            archiver.restore()
    except BackupAbortError as e:
        print(str(e), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
