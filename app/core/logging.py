"""
Logging utilities: JSON structured logging with contextual fields.

- Configures a root logger emitting JSON using python-json-logger.
- Provides a helper to bind contextual fields such as request_id and batch_id.
- Provides secret masking so credentials and tokens never reach the logs in clear.
"""
from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from pythonjsonlogger import jsonlogger


def configure_logging(level: str = "INFO", service: Optional[str] = None, env: Optional[str] = None) -> None:
    handler = logging.StreamHandler(sys.stdout)
    # Static fields are stamped onto every record
    static_fields = {k: v for k, v in (("service", service), ("env", env)) if v}
    formatter = jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s", static_fields=static_fields)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # httpx logs every request at INFO, including full URLs
    logging.getLogger("httpx").setLevel(logging.WARNING)


@contextmanager
def bind_context(logger: logging.Logger, **kwargs: Any) -> Iterator[logging.LoggerAdapter]:
    """Temporarily add contextual fields to a logger's extra dict.

    Usage:
        with bind_context(logger, request_id=..., batch_id=...) as log:
            log.info("message")
    """
    yield _MergingAdapter(logger, kwargs)


class _MergingAdapter(logging.LoggerAdapter):
    # Stock LoggerAdapter replaces a call's extra; merge it instead
    def process(self, msg: Any, kwargs: Any) -> Any:
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """Mask a secret, keeping only its last `visible` characters."""
    if not value:
        return ""
    if len(value) <= visible:
        return "*" * len(value)
    return "*" * (len(value) - visible) + value[-visible:]
