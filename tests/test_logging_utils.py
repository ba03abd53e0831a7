"""Tests for JSON logging helpers."""

import json
import logging
import sys

from faq_platform.logging_utils import (
    JsonFormatter,
    configure_json_logging,
    get_query_id,
    query_id_scope,
    set_query_id,
)


def _record(msg, **extra):
    record = logging.LogRecord("faq_platform.test", logging.INFO, __file__, 1, msg, None, None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_formatter_basic_fields():
    line = json.loads(JsonFormatter().format(_record("hello")))
    assert line["msg"] == "hello"
    assert line["level"] == "INFO"
    assert line["logger"] == "faq_platform.test"
    assert line["ts"].endswith("Z")
    assert "query_id" not in line


def test_formatter_merges_fields_without_overriding():
    line = json.loads(JsonFormatter().format(_record("hello", fields={"hits": 3, "msg": "ignored"})))
    assert line["hits"] == 3
    assert line["msg"] == "hello"


def test_formatter_includes_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record("failed")
        record.exc_info = sys.exc_info()
    line = json.loads(JsonFormatter().format(record))
    assert "RuntimeError: boom" in line["exc"]


def test_query_id_scope_mints_and_resets():
    assert get_query_id() is None
    with query_id_scope() as qid:
        assert qid
        assert get_query_id() == qid
    assert get_query_id() is None


def test_set_query_id_binds_and_clears():
    try:
        set_query_id("abc")
        assert get_query_id() == "abc"
        set_query_id("  q-7 ")
        assert get_query_id() == "q-7"
        set_query_id("   ")
        assert get_query_id() is None
    finally:
        set_query_id(None)
    assert get_query_id() is None


def test_formatter_timestamp_comes_from_record():
    record = _record("epoch")
    record.created = 0.0
    record.msecs = 0.0
    assert json.loads(JsonFormatter().format(record))["ts"] == "1970-01-01T00:00:00Z"


def test_formatter_query_id_comes_from_context():
    with query_id_scope("q-42"):
        line = json.loads(JsonFormatter().format(_record("scoped")))
    assert line["query_id"] == "q-42"
    assert "query_id" not in json.loads(JsonFormatter().format(_record("unscoped")))


def test_configure_json_logging_installs_single_handler(restore_root_logging):
    configure_json_logging(level="DEBUG")
    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
    assert root.level == logging.DEBUG
