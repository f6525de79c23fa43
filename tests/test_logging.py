"""Tests for logging setup and the JSON log formatter."""

import json
import logging
import sys

import pytest

from fatbox.core.config import Settings
from fatbox.core.logging import JSONLogFormatter, setup_logging, upload_id_context
from fatbox.main import create_app


def make_record(message="Chunk stored", exc_info=None, **extra):
    record = logging.LogRecord(
        name="fatbox.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=exc_info,
        func="test_func",
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_logging():
    """Put the root logger back the way pytest configured it."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield root_logger
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


def test_formats_single_line_json():
    output = JSONLogFormatter().format(make_record(destination="catbox"))

    assert "\n" not in output
    entry = json.loads(output)
    assert entry["severity"] == "INFO"
    assert entry["message"] == "Chunk stored"
    assert entry["logger"] == "fatbox.test"
    assert entry["destination"] == "catbox"
    assert entry["timestamp"].endswith("+00:00")
    assert "exception" not in entry


def test_includes_upload_id_from_context():
    token = upload_id_context.set("upload-1")
    try:
        entry = json.loads(JSONLogFormatter().format(make_record()))
    finally:
        upload_id_context.reset(token)

    assert entry["upload_id"] == "upload-1"


def test_includes_exception_traceback():
    try:
        raise ValueError("bad chunk")
    except ValueError:
        record = make_record("Upload error", exc_info=sys.exc_info())

    entry = json.loads(JSONLogFormatter().format(record))

    assert entry["exception"].startswith("Traceback")
    assert "ValueError: bad chunk" in entry["exception"]


class TestSetupLogging:
    """Tests for the environment-driven logging configuration."""

    def test_local_uses_text_at_debug(self, restore_logging):
        setup_logging(Settings(ENV="local", LOG_LEVEL="ERROR"))

        assert restore_logging.level == logging.DEBUG
        assert not isinstance(restore_logging.handlers[0].formatter, JSONLogFormatter)

    def test_production_uses_json_at_configured_level(self, restore_logging):
        setup_logging(Settings(ENV="production", LOG_LEVEL="warning"))

        assert restore_logging.level == logging.WARNING
        assert isinstance(restore_logging.handlers[0].formatter, JSONLogFormatter)

    def test_unknown_level_falls_back_to_info(self, restore_logging):
        setup_logging(Settings(ENV="production", LOG_LEVEL="chatty"))

        assert restore_logging.level == logging.INFO

    def test_create_app_configures_logging_from_given_settings(self, restore_logging, tmp_path):
        """Test that injected settings drive logging, not the environment."""
        create_app(
            Settings(ENV="production", LOG_LEVEL="ERROR", SCRATCH_ROOT=str(tmp_path)),
        )

        assert restore_logging.level == logging.ERROR
        assert isinstance(restore_logging.handlers[0].formatter, JSONLogFormatter)
