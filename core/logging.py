from __future__ import annotations

import json
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

from pythonjsonlogger import jsonlogger

run_id_ctx_var: ContextVar[str] = ContextVar("run_id", default="-")
stream_ctx_var: ContextVar[str] = ContextVar("stream", default="-")


class SyncContextFilter(logging.Filter):
    """Stamps every record with the current run id and the stream being synced."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = run_id_ctx_var.get()
        if not hasattr(record, "stream"):
            record.stream = stream_ctx_var.get()
        return True


def configure_logging(level: str = "INFO") -> None:
    # stdout carries protocol messages only
    log_handler = logging.StreamHandler(sys.stderr)
    formatter = jsonlogger.JsonFormatter("%(asctime)s %(name)s %(levelname)s %(run_id)s %(stream)s %(message)s")
    log_handler.setFormatter(formatter)
    log_handler.addFilter(SyncContextFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(log_handler)


def set_run_id(value: str | None = None) -> str:
    run_id = value or str(uuid.uuid4())
    run_id_ctx_var.set(run_id)
    return run_id


@contextmanager
def stream_context(name: str) -> Iterator[None]:
    token = stream_ctx_var.set(name)
    try:
        yield
    finally:
        stream_ctx_var.reset(token)


def log_event(logger: logging.Logger, event: str, **fields: Any) -> None:
    logger.info(json.dumps({"event": event, **fields}, default=str))
