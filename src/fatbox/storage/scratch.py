"""Scratch directories for in-flight uploads."""

import logging
import re
import shutil
from pathlib import Path
from uuid import uuid4

logger = logging.getLogger(__name__)


class ScratchSpace:
    """Owns the ``uploads/`` and ``temp/`` directories under one root.

    ``uploads/`` holds one subdirectory of chunks per upload identifier,
    ``temp/`` holds assembled files and direct uploads for the lifetime of a
    single request.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root)
        self.uploads_dir = self.root / "uploads"
        self.temp_dir = self.root / "temp"

    def ensure(self) -> None:
        """Create both scratch directories if they do not exist."""
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        self.temp_dir.mkdir(parents=True, exist_ok=True)

    def assembled_path(self, upload_id: str, file_name: str) -> Path:
        """Path of the assembled file for a finished chunked upload."""
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        return self.temp_dir / f"{upload_id}-{self._sanitize_filename(file_name)}"

    def new_temp_path(self) -> Path:
        """Fresh path in ``temp/`` for a direct upload."""
        self.temp_dir.mkdir(parents=True, exist_ok=True)
        return self.temp_dir / uuid4().hex

    def discard(self, path: Path) -> None:
        """Delete a scratch file or directory if it still exists.

        Failures are logged, not raised, so cleanup never masks the outcome
        of the request that owned the path.
        """
        try:
            if path.is_dir():
                shutil.rmtree(path)
            else:
                path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(
                "Failed to remove scratch path",
                extra={"path": str(path), "error": str(e)},
            )
            return
        logger.debug(f"Removed scratch path {path}")

    @staticmethod
    def _sanitize_filename(filename: str) -> str:
        """Remove path traversal and dangerous characters."""
        safe = filename.replace("../", "").replace("..\\", "")
        safe = safe.replace("/", "_").replace("\\", "_")
        safe = re.sub(r"[^a-zA-Z0-9._-]", "_", safe)
        return safe[:200]
