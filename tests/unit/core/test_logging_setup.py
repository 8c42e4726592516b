import json
import logging

import pytest

from core.config import Settings
from core.context import trace_id_var
from core.logging import (
    ColorTextFormatter,
    JsonFormatter,
    _ContextFilter,
    _redact,
    get_logger,
    setup_logging,
)


def _record(msg, level=logging.INFO, name="core.redirect.signal"):
    return logging.LogRecord(name, level, __file__, 1, msg, None, None)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


class TestFormatters:
    def test_redact(self):
        assert _redact("password=hunter2 user=bob") == "password=*** user=bob"
        assert _redact('{"token": "abc"}') == '{"token": "***"}'
        assert _redact("") == ""

    def test_json_formatter(self):
        record = _record("redirect to /a;b")
        record.correlation_id = "trace-1"
        payload = json.loads(JsonFormatter().format(record))
        assert payload["message"] == "redirect to /a;b"
        assert payload["level"] == "INFO"
        assert payload["correlation_id"] == "trace-1"

    def test_text_formatter_without_color(self):
        out = ColorTextFormatter(use_color=False).format(_record("hello"))
        assert "[-][INFO][core.redirect.signal] hello" in out
        assert "\x1b[" not in out

    def test_text_formatter_with_color(self):
        out = ColorTextFormatter(use_color=True).format(_record("bad", level=logging.ERROR))
        assert out.startswith("\x1b[31m")

    def test_context_filter_uses_trace_id(self):
        record = _record("x")
        token = trace_id_var.set("abc123")
        try:
            assert _ContextFilter().filter(record) is True
        finally:
            trace_id_var.reset(token)
        assert record.correlation_id == "abc123"


class TestSetup:
    def test_setup_console_only(self, restore_root_logger):
        root = setup_logging(Settings(_env_file=None, LOG_LEVEL="DEBUG", LOG_COLOR=False))
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, ColorTextFormatter)

    def test_setup_with_file_and_json(self, restore_root_logger, tmp_path):
        root = setup_logging(Settings(
            _env_file=None,
            LOG_FORMAT="json",
            LOG_DIR=tmp_path,
            LOG_LEVEL_OVERRIDES="noisy.lib=error",
        ))
        assert len(root.handlers) == 2
        assert all(isinstance(h.formatter, JsonFormatter) for h in root.handlers)
        assert (tmp_path / "app.log").exists()
        assert logging.getLogger("noisy.lib").level == logging.ERROR

    def test_get_logger_bridges_to_stdlib(self, restore_root_logger, caplog):
        root = setup_logging(Settings(_env_file=None, LOG_LEVEL="INFO"))
        # setup_logging drops every existing root handler, caplog's included
        root.addHandler(caplog.handler)
        with caplog.at_level(logging.INFO):
            get_logger("redirect.test").info("structured event", url="/a")
        assert any(r.getMessage() == "structured event" for r in caplog.records)
