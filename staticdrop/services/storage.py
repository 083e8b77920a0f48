"""Uploads directory ownership and atomic file writes."""

import os
import tempfile
from pathlib import Path

from staticdrop.core.logger import LogIcon, logger
from staticdrop.models.core import DecodedUpload

# mkstemp creates files 0600
FILE_MODE = 0o644


class UploadStore:
    """Write decoded uploads into a single flat directory.

    Writes land in a temporary file next to the target and are moved into place
    with ``os.replace``; concurrent uploads of one name are last-writer-wins.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def ensure_root(self) -> Path:
        """Create the uploads root if missing. Idempotent."""
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def target(self, filename: str) -> Path:
        return self.root / filename

    def save(self, upload: DecodedUpload) -> Path:
        """Write ``upload`` to ``root/filename``, overwriting an existing file."""
        target = self.target(upload.filename)
        fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=".upload-", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(upload.content)
                os.fchmod(handle.fileno(), FILE_MODE)
            os.replace(tmp_name, target)
        except OSError:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info("Upload stored", icon=LogIcon.DATABASE, filename=upload.filename, size=upload.size)
        return target
