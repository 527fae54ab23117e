"""Archive verification

Checks a backup archive before a restore starts destroying bucket contents.
"""

import logging
import tarfile
from pathlib import Path
from typing import Optional, Tuple


class ArchiveVerifier:
    """Verifies that a local backup archive can be restored from"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def verify_archive(self, filepath: Path) -> Tuple[bool, Optional[str]]:
        """Verify the archive exists and starts with a readable tar member

        Only the first header is read so that multi-gigabyte archives are
        not decompressed twice.

        Args:
            filepath: Path to tar archive

        Returns:
            Tuple of (success, error_message)
        """
        filepath = Path(filepath)
        if not filepath.is_file():
            return False, f"{filepath} not found"

        try:
            with tarfile.open(filepath, "r:*") as tar:
                if tar.next() is None:
                    return False, f"{filepath} is an empty archive"
        except (tarfile.TarError, OSError, EOFError) as e:
            error_msg = f"{filepath} is not a readable tar archive: {e}"
            self.logger.error(error_msg)
            return False, error_msg

        self.logger.debug(f"Archive {filepath.name} verified")
        return True, None
