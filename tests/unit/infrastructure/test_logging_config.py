"""日志配置单元测试"""

import json
import logging

from vault_gateway.infrastructure.logging_config import JsonFormatter, setup_logging
from tests.conftest import make_settings


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="vault_gateway.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Tokenize: %s",
        args=("cluster=c1",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_formats_one_json_object_per_record(self) -> None:
        payload = json.loads(JsonFormatter().format(make_record(request_id="req-1")))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "vault_gateway.test"
        assert payload["message"] == "Tokenize: cluster=c1"
        assert payload["request_id"] == "req-1"
        assert "timestamp" in payload


class TestSetupLogging:
    def test_repeated_setup_keeps_single_handler(self) -> None:
        root = logging.getLogger()
        previous_level = root.level
        try:
            setup_logging(make_settings(log_format="json", log_level="debug"))
            setup_logging(make_settings(log_format="json", log_level="debug"))

            handlers = [h for h in root.handlers if h.get_name() == "vault_gateway"]
            assert len(handlers) == 1
            assert isinstance(handlers[0].formatter, JsonFormatter)
            assert root.level == logging.DEBUG
        finally:
            for handler in [h for h in root.handlers if h.get_name() == "vault_gateway"]:
                root.removeHandler(handler)
            root.setLevel(previous_level)
