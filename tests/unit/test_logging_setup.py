"""Tests for structlog-backed logging configuration."""

from __future__ import annotations

import io
import json
import logging

import pytest

from branch_wrangler.observability import configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_json_output_includes_extra_fields(restore_root_logger):
    stream = io.StringIO()
    configure_logging(level="INFO", json_output=True, stream=stream, force=True)

    logging.getLogger("branch_wrangler.test").info(
        "Provisioning D1 database", extra={"resource_name": "my-app-db-x"},
    )

    record = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert record["event"] == "Provisioning D1 database"
    assert record["resource_name"] == "my-app-db-x"
    assert record["level"] == "info"
    assert record["logger"] == "branch_wrangler.test"


def test_console_output_respects_level(restore_root_logger):
    stream = io.StringIO()
    configure_logging(level="WARNING", stream=stream, force=True)

    log = logging.getLogger("branch_wrangler.test")
    log.info("hidden")
    log.warning("Empty branch suffix generated")

    output = stream.getvalue()
    assert "hidden" not in output
    assert "Empty branch suffix generated" in output


def test_noisy_libraries_quieted(restore_root_logger):
    configure_logging(stream=io.StringIO(), force=True)
    assert logging.getLogger("httpx").level == logging.WARNING
