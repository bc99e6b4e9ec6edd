import io
import json
import logging

from user_registry.infra.logging_config import JSONFormatter, get_logger, setup_logging


def test_json_formatter_includes_service_and_extra():
    formatter = JSONFormatter("user-management")
    record = logging.LogRecord(
        name="user_registry.api",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg="request details",
        args=(),
        exc_info=None,
    )
    record.method = "GET"

    payload = json.loads(formatter.format(record))

    assert payload["message"] == "request details"
    assert payload["level"] == "INFO"
    assert payload["service"] == "user-management"
    assert payload["method"] == "GET"


def test_setup_logging_writes_json_lines():
    stream = io.StringIO()
    setup_logging("registry", "WARNING", stream=stream)

    get_logger("test").info("hidden")
    get_logger("test").warning("attempt failed", extra={"attempt": 2})

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["logger"] == "user_registry.test"
    assert record["service"] == "registry"
    assert record["attempt"] == 2
