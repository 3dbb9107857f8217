import io
import json
import logging

from app.core.logging import bind_context, configure_logging, mask_secret


def test_mask_secret_keeps_last_four():
    assert mask_secret("abcdefgh") == "****efgh"
    assert mask_secret("abc") == "***"
    assert mask_secret(None) == ""


def test_bind_context_merges_call_extra():
    logger = logging.getLogger("tests.bind_context")
    records = []

    class Collector(logging.Handler):
        def emit(self, record):
            records.append(record)

    handler = Collector()
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        with bind_context(logger, request_id="req-1") as log:
            log.info("event", extra={"batch_id": "b-1"})
    finally:
        logger.removeHandler(handler)

    assert records[0].request_id == "req-1"
    assert records[0].batch_id == "b-1"


def test_configure_logging_emits_json_with_static_fields(monkeypatch):
    stream = io.StringIO()
    monkeypatch.setattr("sys.stdout", stream)
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging("INFO", service="airbyte-sync-service", env="test")
        logging.getLogger("tests.json").info("airbyte_token_acquired", extra={"expires_in": 180})
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    payload = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert payload["message"] == "airbyte_token_acquired"
    assert payload["service"] == "airbyte-sync-service"
    assert payload["env"] == "test"
    assert payload["expires_in"] == 180
