"""Reassembly of chunked uploads."""

import asyncio
import logging
from pathlib import Path

from fatbox.core.exceptions import SessionNotFoundError, StorageError
from fatbox.storage.chunk_store import ChunkStore

logger = logging.getLogger(__name__)


class Assembler:
    """Concatenates the chunks of an upload into a single file."""

    def __init__(self, chunk_store: ChunkStore):
        self.chunk_store = chunk_store

    async def assemble(self, upload_id: str, output_path: Path) -> Path:
        """Write every chunk of an upload to ``output_path`` in index order.

        The output is the exact concatenation of the chunk payloads, sorted
        numerically by chunk index. Each chunk is read fully into memory
        before it is appended.

        Args:
            upload_id: Upload identifier
            output_path: Destination of the assembled file

        Returns:
            The output path

        Raises:
            SessionNotFoundError: If the upload has no session or no chunks
            StorageError: If reading chunks or writing the output fails
        """
        if not self.chunk_store.has_session(upload_id):
            raise SessionNotFoundError("No chunks found for this uploadId")

        try:
            chunks = await asyncio.to_thread(self.chunk_store.list_chunks, upload_id)
        except OSError as e:
            raise StorageError(f"Failed to list chunks for {upload_id}: {e}") from e
        if not chunks:
            raise SessionNotFoundError("No chunks found for this uploadId")

        logger.info(
            f"Reassembling {len(chunks)} chunks for uploadId {upload_id}",
            extra={"upload_id": upload_id, "chunk_count": len(chunks)},
        )

        try:
            size_bytes = await asyncio.to_thread(
                self._concatenate, [path for _, path in chunks], output_path
            )
        except OSError as e:
            raise StorageError(f"Failed to assemble {upload_id}: {e}") from e

        logger.info(
            f"Assembled file ready: {output_path}",
            extra={"upload_id": upload_id, "size_bytes": size_bytes},
        )
        return output_path

    @staticmethod
    def _concatenate(chunk_paths: list[Path], output_path: Path) -> int:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        size_bytes = 0
        with open(output_path, "wb") as out:
            for chunk_path in chunk_paths:
                data = chunk_path.read_bytes()
                out.write(data)
                size_bytes += len(data)
        return size_bytes
