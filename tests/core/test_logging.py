from __future__ import annotations

import json
import logging
import sys

from extract_relay.core.logging import JsonFormatter


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="extract_relay.extract",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Upstream responded %s",
        args=("ok",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formats_third_party_records_without_extras() -> None:
    line = json.loads(JsonFormatter().format(_record()))

    assert line["message"] == "Upstream responded ok"
    assert line["logger"] == "extract_relay.extract"
    assert line["request_id"] is None
    assert "upstream_status" not in line


def test_includes_correlation_and_upstream_fields() -> None:
    line = json.loads(
        JsonFormatter().format(
            _record(
                request_id="req_1",
                http_method="POST",
                request_path="/api/extract",
                upstream_status=429,
                upstream_duration_ms=12.5,
            )
        )
    )

    assert line["request_id"] == "req_1"
    assert line["method"] == "POST"
    assert line["path"] == "/api/extract"
    assert line["upstream_status"] == 429
    assert line["upstream_duration_ms"] == 12.5


def test_includes_exception_text() -> None:
    try:
        raise ValueError("broken")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()

    line = json.loads(JsonFormatter().format(record))
    assert "ValueError: broken" in line["exception"]
