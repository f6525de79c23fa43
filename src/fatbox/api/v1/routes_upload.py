"""Upload API routes."""

import asyncio
import logging
import shutil
from contextlib import ExitStack
from pathlib import Path
from typing import BinaryIO, Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from pydantic import ValidationError

from fatbox.api.dependencies import (
    get_assembler,
    get_chunk_store,
    get_forwarder,
    get_scratch,
    get_settings,
)
from fatbox.core.config import Settings
from fatbox.core.exceptions import (
    InvalidInputError,
    SessionNotFoundError,
    StorageError,
    UploadFailedError,
)
from fatbox.core.logging import upload_id_context
from fatbox.destinations.base import ForwardOptions
from fatbox.destinations.forwarder import DestinationForwarder
from fatbox.models.upload import ChunkResponse, FinishRequest, UploadURLResponse
from fatbox.storage.assembler import Assembler
from fatbox.storage.chunk_store import ChunkStore
from fatbox.storage.scratch import ScratchSpace

router = APIRouter(tags=["upload"])
logger = logging.getLogger(__name__)

DEFAULT_DIRECT_FILENAME = "upload.dat"


def _forward_options(settings: Settings, userhash: Optional[str], time: Optional[str]) -> ForwardOptions:
    return ForwardOptions(
        userhash=userhash or None,
        time=time or settings.DEFAULT_LITTERBOX_TIME,
    )


def _save_upload(source: BinaryIO, target: Path) -> None:
    try:
        with open(target, "wb") as f:
            shutil.copyfileobj(source, f, 65536)
    except OSError as e:
        raise StorageError(f"Failed to store upload: {e}") from e


async def _read_finish_request(request: Request) -> FinishRequest:
    """Parse finish fields from a JSON, urlencoded or multipart body."""
    content_type = request.headers.get("content-type", "")
    try:
        if content_type.startswith("application/json"):
            payload = await request.json()
        else:
            form = await request.form()
            payload = {key: value for key, value in form.items() if isinstance(value, str)}
    except ValueError as e:
        raise InvalidInputError("Malformed JSON body", details=str(e)) from e

    if not isinstance(payload, dict):
        raise InvalidInputError("Request body must be an object")

    try:
        return FinishRequest.model_validate(payload)
    except ValidationError as e:
        raise InvalidInputError("Invalid finish request", details=str(e)) from e


@router.post("/chunk", response_model=ChunkResponse)
async def upload_chunk(
    upload_id: Optional[str] = Form(None, alias="uploadId"),
    index: Optional[str] = Form(None),
    chunk: Optional[UploadFile] = File(None),
    chunk_store: ChunkStore = Depends(get_chunk_store),
) -> ChunkResponse:
    """Store one chunk of a chunked upload."""
    if not upload_id or not index:
        logger.warning("Chunk upload missing uploadId or index")
        raise InvalidInputError("Missing uploadId or index")

    upload_id_context.set(upload_id)

    try:
        chunk_index = int(index)
    except ValueError:
        raise InvalidInputError(f"index must be an integer, got {index!r}") from None

    if chunk is None:
        raise InvalidInputError("Missing chunk")

    await chunk_store.put_chunk(upload_id, chunk_index, chunk.file)

    logger.info(f"Received chunk {chunk_index} for uploadId: {upload_id}")
    return ChunkResponse(message=f"Chunk {chunk_index} for {upload_id} received.")


@router.post("/finish", response_model=UploadURLResponse)
async def finish_upload(
    request: Request,
    settings: Settings = Depends(get_settings),
    scratch: ScratchSpace = Depends(get_scratch),
    chunk_store: ChunkStore = Depends(get_chunk_store),
    assembler: Assembler = Depends(get_assembler),
    forwarder: DestinationForwarder = Depends(get_forwarder),
) -> UploadURLResponse:
    """Reassemble a chunked upload and relay it to a destination.

    The session directory and the assembled file are removed once assembly
    has started, whether the relay succeeds or not.
    """
    fields = await _read_finish_request(request)
    if not fields.upload_id or not fields.filename or not fields.destination:
        logger.warning("Finish called with missing parameters")
        raise InvalidInputError("Missing uploadId, filename, or destination")

    upload_id = fields.upload_id
    upload_id_context.set(upload_id)

    forwarder.resolve(fields.destination)

    if not chunk_store.has_session(upload_id):
        logger.warning(f"No chunks found for uploadId {upload_id}")
        raise SessionNotFoundError("No chunks found for this uploadId")

    final_path = scratch.assembled_path(upload_id, fields.filename)
    options = _forward_options(settings, fields.userhash, fields.time)

    async with chunk_store.lock(upload_id):
        with ExitStack() as cleanup:
            cleanup.callback(scratch.discard, final_path)
            cleanup.callback(scratch.discard, chunk_store.session_path(upload_id))

            try:
                await assembler.assemble(upload_id, final_path)
                url = await forwarder.forward(fields.destination, final_path, fields.filename, options)
            except SessionNotFoundError:
                raise
            except Exception as e:
                logger.error(
                    f"Upload error: {e}",
                    extra={"destination": fields.destination},
                    exc_info=True,
                )
                raise UploadFailedError("Upload failed", e) from e

    logger.info(f"Uploaded {upload_id} to {fields.destination}: {url}")
    return UploadURLResponse(url=url)


@router.post("/direct", response_model=UploadURLResponse)
async def direct_upload(
    file: Optional[UploadFile] = File(None),
    destination: Optional[str] = Form(None),
    userhash: Optional[str] = Form(None),
    time: Optional[str] = Form(None),
    settings: Settings = Depends(get_settings),
    scratch: ScratchSpace = Depends(get_scratch),
    forwarder: DestinationForwarder = Depends(get_forwarder),
) -> UploadURLResponse:
    """Relay a single whole-file upload to a destination.

    The temporary copy of the upload is removed whether the relay succeeds
    or not.
    """
    if file is None or not destination:
        logger.warning("Direct upload missing file or destination")
        raise InvalidInputError("Missing file or destination")

    forwarder.resolve(destination)

    display_name = file.filename or DEFAULT_DIRECT_FILENAME
    logger.info(f"Direct upload received: {display_name} -> {destination}")

    temp_path = scratch.new_temp_path()
    options = _forward_options(settings, userhash, time)

    with ExitStack() as cleanup:
        cleanup.callback(scratch.discard, temp_path)

        try:
            await asyncio.to_thread(_save_upload, file.file, temp_path)
            url = await forwarder.forward(destination, temp_path, display_name, options)
        except Exception as e:
            logger.error(
                f"Direct upload error: {e}",
                extra={"destination": destination},
                exc_info=True,
            )
            raise UploadFailedError("Direct upload failed", e) from e

    logger.info(f"Direct upload complete: {url}")
    return UploadURLResponse(url=url)
