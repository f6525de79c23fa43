"""Request-scoped access to the components built in ``create_app``."""

from fastapi import Request

from fatbox.core.config import Settings
from fatbox.destinations.forwarder import DestinationForwarder
from fatbox.storage.assembler import Assembler
from fatbox.storage.chunk_store import ChunkStore
from fatbox.storage.scratch import ScratchSpace


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_scratch(request: Request) -> ScratchSpace:
    return request.app.state.scratch


def get_chunk_store(request: Request) -> ChunkStore:
    return request.app.state.chunk_store


def get_assembler(request: Request) -> Assembler:
    return request.app.state.assembler


def get_forwarder(request: Request) -> DestinationForwarder:
    return request.app.state.forwarder
