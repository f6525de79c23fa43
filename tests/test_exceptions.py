"""Smoke tests for fatbox exceptions."""

import pytest

from fatbox.core.exceptions import (
    FatboxError,
    InvalidInputError,
    SessionNotFoundError,
    StorageError,
    UploadFailedError,
    UpstreamError,
    UpstreamTimeoutError,
)


def test_exception_hierarchy():
    """Test that all exceptions inherit from FatboxError."""
    assert issubclass(InvalidInputError, FatboxError)
    assert issubclass(SessionNotFoundError, FatboxError)
    assert issubclass(StorageError, FatboxError)
    assert issubclass(UpstreamError, FatboxError)
    assert issubclass(UpstreamTimeoutError, UpstreamError)
    assert issubclass(UploadFailedError, FatboxError)


def test_status_codes():
    """Test the HTTP status carried by each error kind."""
    assert InvalidInputError("x").status_code == 400
    assert SessionNotFoundError("x").status_code == 400
    assert StorageError("x").status_code == 500
    assert UpstreamError("x").status_code == 500
    assert UpstreamTimeoutError("x").status_code == 504


def test_upload_failed_takes_status_and_details_from_cause():
    """Test that the endpoint wrapper keeps the cause's status and text."""
    wrapped = UploadFailedError("Upload failed", UpstreamTimeoutError("pomf timed out"))
    assert wrapped.status_code == 504
    assert wrapped.message == "Upload failed"
    assert wrapped.details == "pomf timed out"

    wrapped = UploadFailedError("Upload failed", RuntimeError("boom"))
    assert wrapped.status_code == 500
    assert wrapped.details == "boom"


def test_exceptions_can_be_caught_as_base():
    """Test that specific exceptions can be caught as FatboxError."""
    with pytest.raises(FatboxError):
        raise SessionNotFoundError("No chunks found for this uploadId")

    with pytest.raises(UpstreamError):
        raise UpstreamTimeoutError("timed out")
