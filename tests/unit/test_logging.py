import asyncio
import io
import json
import logging
from pathlib import Path

import pytest

from app.core.logging import JsonFormatter, get_logger, log_fields, setup_logging
from app.services.storage import FileBlob, LocalFileStorage


@pytest.fixture
def root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


def _json_logger(name: str) -> tuple[logging.Logger, io.StringIO]:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter())
    logger = get_logger(name)
    logger.handlers = [handler]
    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger, stream


def test_structured_fields_reach_the_json_line():
    logger, stream = _json_logger("tests.logging.fields")

    logger.info(
        "Submission step failed",
        extra=log_fields(step="upload_resume", submission_id="sub-1", error_kind="upload_failed", error=None),
    )

    payload = json.loads(stream.getvalue())
    assert payload["message"] == "Submission step failed"
    assert payload["level"] == "INFO"
    assert payload["step"] == "upload_resume"
    assert payload["submission_id"] == "sub-1"
    assert payload["error_kind"] == "upload_failed"
    assert "error" not in payload


def test_exception_text_is_included():
    logger, stream = _json_logger("tests.logging.exc")

    try:
        raise RuntimeError("socket closed")
    except RuntimeError:
        logger.exception("Submission run aborted", extra=log_fields(submission_id="sub-2"))

    payload = json.loads(stream.getvalue())
    assert payload["submission_id"] == "sub-2"
    assert "RuntimeError: socket closed" in payload["exception"]


def test_upload_succeeds_and_logs_with_info_enabled(tmp_path: Path, root_logging, capsys):
    setup_logging(logging.INFO)

    result = asyncio.run(
        LocalFileStorage(tmp_path).upload([FileBlob(filename="r.pdf", content=b"%PDF-1.4", content_type="application/pdf")])
    )

    assert result is not None
    lines = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.strip()]
    stored = [line for line in lines if line["message"] == "Stored upload"]
    assert stored[0]["upload_name"] == "r.pdf"
    assert stored[0]["path"] == result.path
