"""Pytest configuration and shared fixtures."""

import json
import re
from typing import Callable, Dict, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from fatbox.core.config import Settings
from fatbox.destinations.factory import build_destinations
from fatbox.destinations.forwarder import DestinationForwarder
from fatbox.main import create_app

POMF_FILE_URL = "https://pomf2.lain.la/f/abc123.bin"
CATBOX_FILE_URL = "https://files.catbox.moe/abc123.bin"
LITTERBOX_FILE_URL = "https://litter.catbox.moe/xyz789.bin"


class StubUpstream:
    """Stand-in for the hosting services behind ``httpx.MockTransport``.

    Captures every outbound request and answers per host. A host handler may
    return a response or raise an httpx exception.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.handlers: Dict[str, Callable[[httpx.Request], httpx.Response]] = {
            "pomf.lain.la": lambda request: httpx.Response(
                200, json={"success": True, "files": [{"url": POMF_FILE_URL, "name": "abc123.bin"}]}
            ),
            "catbox.moe": lambda request: httpx.Response(200, text=CATBOX_FILE_URL),
            "litterbox.catbox.moe": lambda request: httpx.Response(200, text=LITTERBOX_FILE_URL),
        }

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handlers[request.url.host](request)

    def respond(self, host: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handlers[host] = handler

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]


def parse_multipart(request: httpx.Request) -> Dict[str, Tuple[Optional[str], bytes]]:
    """Split a captured multipart request into ``name -> (filename, body)``."""
    boundary = request.headers["content-type"].split("boundary=")[1].encode()
    fields: Dict[str, Tuple[Optional[str], bytes]] = {}
    for part in request.content.split(b"--" + boundary):
        if b"\r\n\r\n" not in part:
            continue
        headers, _, body = part.partition(b"\r\n\r\n")
        name = re.search(rb'name="([^"]+)"', headers)
        if not name:
            continue
        filename = re.search(rb'filename="([^"]*)"', headers)
        if body.endswith(b"\r\n"):
            body = body[:-2]
        fields[name.group(1).decode()] = (filename.group(1).decode() if filename else None, body)
    return fields


def pomf_failure(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, text=json.dumps({"success": False, "errorcode": 400}))


@pytest.fixture
def app_settings(tmp_path):
    """Settings with an isolated scratch root per test."""
    return Settings(
        SCRATCH_ROOT=str(tmp_path / "scratch"),
        FORWARD_TIMEOUT_SECONDS=5,
        FORWARD_MAX_ATTEMPTS=2,
        FORWARD_RETRY_JITTER_SECONDS=0,
    )


@pytest.fixture
def upstream():
    return StubUpstream()


@pytest.fixture
def forwarder(app_settings, upstream):
    """Forwarder wired to the stub upstream."""
    return DestinationForwarder(
        build_destinations(app_settings),
        timeout=app_settings.FORWARD_TIMEOUT_SECONDS,
        max_attempts=app_settings.FORWARD_MAX_ATTEMPTS,
        retry_jitter=app_settings.FORWARD_RETRY_JITTER_SECONDS,
        transport=httpx.MockTransport(upstream),
    )


@pytest.fixture
def app(app_settings, forwarder):
    return create_app(app_settings, forwarder=forwarder)


@pytest.fixture
def client(app):
    """Create test client with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client
