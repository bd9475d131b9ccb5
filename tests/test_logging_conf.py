from __future__ import annotations

import json
import logging

import pytest
import structlog

from page_tracker import logging_conf
from page_tracker.logging_conf import configure_logging, tail_log


@pytest.fixture
def isolated_logging(tmp_path, monkeypatch):
    monkeypatch.setenv(logging_conf.LOG_DIR_ENV_VAR, str(tmp_path))
    monkeypatch.setattr(logging_conf, "_LOGGING_INITIALISED", False)
    yield tmp_path
    for name in ("page_tracker", "httpx"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
    structlog.reset_defaults()


def test_configure_logging_writes_json_lines(isolated_logging) -> None:
    logger = configure_logging()
    logger.info("keys_found", count=3)
    logger.error("export_failed", reason="disk full")
    for handler in logging.getLogger("page_tracker").handlers:
        handler.flush()

    info_lines = (isolated_logging / logging_conf.INFO_LOG_NAME).read_text(encoding="utf-8").splitlines()
    error_lines = (isolated_logging / logging_conf.ERROR_LOG_NAME).read_text(encoding="utf-8").splitlines()
    first = json.loads(info_lines[0])
    assert first["message"] == "keys_found"
    assert first["count"] == 3
    assert len(info_lines) == 2
    assert len(error_lines) == 1
    assert json.loads(error_lines[0])["reason"] == "disk full"


def test_tail_log(tmp_path) -> None:
    path = tmp_path / "app.log"
    assert tail_log(path) == []
    path.write_text("".join(f"line {index}\n" for index in range(10)), encoding="utf-8")
    assert tail_log(path, 3) == ["line 7\n", "line 8\n", "line 9\n"]
