"""Tests for JSONFormatter and settings — structured log fields and URL rewriting."""

import json
import logging

import pytest

from chainmgr.config import Settings
from chainmgr.infrastructure.observability import JSONFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "chainmgr.test", logging.ERROR, __file__, 1, "deploy failed", None, None,
    )
    record.__dict__.update(extra)
    return record


def test_json_formatter_surfaces_chain_fields():
    line = JSONFormatter().format(_record(chain_id=7, chain_name="alpha", host="10.0.0.1"))
    payload = json.loads(line)
    assert payload["message"] == "deploy failed"
    assert payload["level"] == "ERROR"
    assert payload["chain_id"] == 7
    assert payload["chain_name"] == "alpha"
    assert payload["host"] == "10.0.0.1"


def test_json_formatter_omits_absent_fields():
    payload = json.loads(JSONFormatter().format(_record()))
    assert "chain_id" not in payload
    assert "error_code" not in payload


def test_postgres_url_rewritten_for_asyncpg():
    settings = Settings(database_url="postgresql://u:p@h:5432/db")
    assert settings.database_url == "postgresql+asyncpg://u:p@h:5432/db"


def test_json_formatter_surfaces_error_fields():
    payload = json.loads(JSONFormatter().format(
        _record(error_code="HOST_CONNECT_ERROR", http_status=502, category="external_host"),
    ))
    assert payload["error_code"] == "HOST_CONNECT_ERROR"
    assert payload["http_status"] == 502
    assert payload["category"] == "external_host"


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    noisy = {name: logging.getLogger(name).level for name in ("paramiko", "docker")}
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)
    for name, lvl in noisy.items():
        logging.getLogger(name).setLevel(lvl)


def test_setup_logging_twice_keeps_one_handler(root_logger):
    before = len(root_logger.handlers)
    first = setup_logging("DEBUG", "json")
    second = setup_logging("INFO", "text")

    assert len(root_logger.handlers) == before + 1
    assert second in root_logger.handlers and first not in root_logger.handlers
    assert root_logger.level == logging.INFO
    assert not isinstance(second.formatter, JSONFormatter)


def test_setup_logging_quiets_ssh_and_docker(root_logger):
    setup_logging("DEBUG")
    assert logging.getLogger("paramiko").level == logging.WARNING
    assert logging.getLogger("docker").level == logging.WARNING
