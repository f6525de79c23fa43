"""Filesystem-backed staging area for chunked uploads."""

import asyncio
import logging
import os
import shutil
import weakref
from pathlib import Path
from typing import BinaryIO
from uuid import uuid4

from fatbox.core.exceptions import InvalidInputError, StorageError

logger = logging.getLogger(__name__)

CHUNK_PREFIX = "chunk_"
COPY_BUFFER_SIZE = 65536  # 64KB


def parse_chunk_index(file_name: str) -> int | None:
    """Return the index encoded in a chunk file name, or None if it is not one."""
    if not file_name.startswith(CHUNK_PREFIX):
        return None
    try:
        return int(file_name[len(CHUNK_PREFIX):])
    except ValueError:
        return None


class ChunkStore:
    """Stores chunks as ``<base_path>/<upload_id>/chunk_<index>``.

    A session directory exists from the first chunk write until the session
    is removed. Writing the same index twice replaces the earlier payload.
    """

    def __init__(self, base_path: Path | str):
        self.base_path = Path(base_path)
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def session_path(self, upload_id: str | None) -> Path:
        """Directory for an upload identifier.

        Raises:
            InvalidInputError: If the identifier is empty or would escape
                the staging area
        """
        if not upload_id:
            raise InvalidInputError("Missing uploadId")
        if (
            upload_id in (".", "..")
            or "/" in upload_id
            or "\\" in upload_id
            or "\x00" in upload_id
        ):
            raise InvalidInputError(f"Invalid uploadId: {upload_id!r}")
        return self.base_path / upload_id

    def has_session(self, upload_id: str) -> bool:
        return self.session_path(upload_id).is_dir()

    def lock(self, upload_id: str) -> asyncio.Lock:
        """Per-session lock serializing chunk writes and assembly.

        The lock lives as long as someone holds a reference to it.
        """
        lock = self._locks.get(upload_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[upload_id] = lock
        return lock

    async def put_chunk(self, upload_id: str | None, index: int | None, data: BinaryIO) -> Path:
        """Write (or overwrite) one chunk of an upload.

        Args:
            upload_id: Upload identifier
            index: Chunk index within the upload
            data: Chunk content stream

        Returns:
            Path of the stored chunk

        Raises:
            InvalidInputError: If upload_id or index is missing
            StorageError: If the chunk cannot be written
        """
        session_dir = self.session_path(upload_id)
        if index is None:
            raise InvalidInputError("Missing index")

        async with self.lock(upload_id):
            try:
                return await asyncio.to_thread(self._write_chunk, session_dir, index, data)
            except OSError as e:
                raise StorageError(f"Failed to write chunk {index} for {upload_id}: {e}") from e

    @staticmethod
    def _write_chunk(session_dir: Path, index: int, data: BinaryIO) -> Path:
        session_dir.mkdir(parents=True, exist_ok=True)
        target = session_dir / f"{CHUNK_PREFIX}{index}"
        partial = session_dir / f".{target.name}.{uuid4().hex}.part"

        try:
            with open(partial, "wb") as f:
                shutil.copyfileobj(data, f, COPY_BUFFER_SIZE)
            os.replace(partial, target)
        except OSError:
            partial.unlink(missing_ok=True)
            raise

        logger.debug(f"Stored {target} ({target.stat().st_size} bytes)")
        return target

    def list_chunks(self, upload_id: str) -> list[tuple[int, Path]]:
        """List ``(index, path)`` pairs of an upload in ascending index order.

        Files in the session directory that are not chunks are ignored.
        """
        session_dir = self.session_path(upload_id)
        chunks = []
        for entry in session_dir.iterdir():
            index = parse_chunk_index(entry.name)
            if index is None or not entry.is_file():
                continue
            chunks.append((index, entry))
        chunks.sort(key=lambda item: item[0])
        return chunks

    def remove_session(self, upload_id: str) -> None:
        """Delete the session directory and every chunk in it."""
        session_dir = self.session_path(upload_id)
        if session_dir.exists():
            shutil.rmtree(session_dir)
            logger.debug(f"Removed session directory {session_dir}")
