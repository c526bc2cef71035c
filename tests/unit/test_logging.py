"""Unit tests for logging helpers and JSON serialization."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from sqlproxy._serialization import decode_json, encode_json
from sqlproxy.utils.logging import (
    CorrelationIDFilter,
    StructuredFormatter,
    configure_logging,
    get_correlation_id,
    get_logger,
    log_with_context,
    set_correlation_id,
)


@pytest.fixture
def restore_sqlproxy_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger("sqlproxy")
    handlers, level, propagate = list(root.handlers), root.level, root.propagate
    try:
        yield root
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)
        root.propagate = propagate


@pytest.fixture
def correlation_id() -> Iterator[str]:
    set_correlation_id("corr-42")
    try:
        yield "corr-42"
    finally:
        set_correlation_id(None)


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def _record(message: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="sqlproxy.test", level=logging.INFO, pathname=__file__, lineno=1, msg=message, args=(), exc_info=None
    )


def test_get_logger_namespaces_under_sqlproxy() -> None:
    assert get_logger().name == "sqlproxy"
    assert get_logger("listener").name == "sqlproxy.listener"
    assert get_logger("sqlproxy.proxy").name == "sqlproxy.proxy"


def test_get_logger_adds_one_correlation_filter() -> None:
    logger = get_logger("tests.filters")
    get_logger("tests.filters")
    assert sum(isinstance(f, CorrelationIDFilter) for f in logger.filters) == 1


def test_correlation_filter_sets_attribute(correlation_id: str) -> None:
    record = _record()
    assert CorrelationIDFilter().filter(record) is True
    assert record.correlation_id == correlation_id  # type: ignore[attr-defined]


def test_correlation_id_roundtrip() -> None:
    set_correlation_id("abc")
    try:
        assert get_correlation_id() == "abc"
    finally:
        set_correlation_id(None)
    assert get_correlation_id() is None


def test_structured_formatter_emits_json(correlation_id: str) -> None:
    record = _record("query done")
    record.extra_fields = {"elapsed_ms": 3}  # type: ignore[attr-defined]

    payload = decode_json(StructuredFormatter().format(record))

    assert payload["message"] == "query done"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "sqlproxy.test"
    assert payload["correlation_id"] == correlation_id
    assert payload["elapsed_ms"] == 3


def test_configure_logging_installs_handlers(restore_sqlproxy_logger: logging.Logger) -> None:
    extra = _ListHandler()
    configure_logging(level="debug", format_style="simple", extra_handlers=[extra])

    assert restore_sqlproxy_logger.level == logging.DEBUG
    assert restore_sqlproxy_logger.propagate is False
    assert extra in restore_sqlproxy_logger.handlers
    assert isinstance(restore_sqlproxy_logger.handlers[0].formatter, logging.Formatter)
    assert extra.records[-1].getMessage() == "sqlproxy logging configured"


def test_configure_logging_structured_file(restore_sqlproxy_logger: logging.Logger, tmp_path: Path) -> None:
    log_file = str(tmp_path / "sqlproxy.log")
    configure_logging(level="INFO", log_to_file=log_file)
    try:
        assert isinstance(restore_sqlproxy_logger.handlers[0].formatter, StructuredFormatter)
        assert any(isinstance(handler, logging.FileHandler) for handler in restore_sqlproxy_logger.handlers)
    finally:
        for handler in restore_sqlproxy_logger.handlers:
            handler.close()


def test_log_with_context_attaches_fields() -> None:
    logger = logging.getLogger("tests.context")
    logger.setLevel(logging.INFO)
    handler = _ListHandler()
    logger.addHandler(handler)
    try:
        log_with_context(logger, logging.INFO, "connection opened", connection_id="1")
        log_with_context(logger, logging.DEBUG, "skipped")
    finally:
        logger.removeHandler(handler)

    (record,) = handler.records
    assert record.extra_fields == {"connection_id": "1"}  # type: ignore[attr-defined]


def test_encode_json_falls_back_to_repr() -> None:
    class Opaque:
        def __repr__(self) -> str:
            return "Opaque()"

    assert encode_json({"value": Opaque()}) == '{"value":"Opaque()"}'
    assert encode_json([1, None], as_bytes=True) == b"[1,null]"
    assert decode_json(b'{"a":1}') == {"a": 1}
