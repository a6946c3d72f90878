from __future__ import annotations

import logging
import sys
import time
from typing import Any, Dict, List, Literal, Optional, TextIO

from pydantic import BaseModel

logger = logging.getLogger(__name__)

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "FATAL": logging.CRITICAL,
}


class RecordPayload(BaseModel):
    stream: str
    data: Dict[str, Any]
    emitted_at: int


class RecordMessage(BaseModel):
    type: Literal["RECORD"] = "RECORD"
    record: RecordPayload


class StatePayload(BaseModel):
    data: Dict[str, Dict[str, Any]]


class StateMessage(BaseModel):
    type: Literal["STATE"] = "STATE"
    state: StatePayload


class LogPayload(BaseModel):
    level: str
    message: str


class LogMessage(BaseModel):
    type: Literal["LOG"] = "LOG"
    log: LogPayload


class ConnectionStatus(BaseModel):
    status: Literal["SUCCEEDED", "FAILED"]
    message: Optional[str] = None


class ConnectionStatusMessage(BaseModel):
    type: Literal["CONNECTION_STATUS"] = "CONNECTION_STATUS"
    connectionStatus: ConnectionStatus


class CatalogMessage(BaseModel):
    type: Literal["CATALOG"] = "CATALOG"
    catalog: Dict[str, List[Dict[str, Any]]]


class SpecMessage(BaseModel):
    type: Literal["SPEC"] = "SPEC"
    spec: Dict[str, Any]


class MessageEmitter:
    """Writes protocol messages to a text sink, one JSON object per line."""

    def __init__(self, sink: Optional[TextIO] = None) -> None:
        self._sink = sink

    @property
    def sink(self) -> TextIO:
        return self._sink if self._sink is not None else sys.stdout

    def record(self, stream: str, data: Dict[str, Any]) -> None:
        payload = RecordPayload(stream=stream, data=data, emitted_at=int(time.time() * 1000))
        self._write(RecordMessage(record=payload))

    def state(self, stream: str, value: Dict[str, Any]) -> None:
        self._write(StateMessage(state=StatePayload(data={stream: value})))

    def log(self, level: str, message: str) -> None:
        logger.log(LOG_LEVELS.get(level, logging.INFO), message)
        self._write(LogMessage(log=LogPayload(level=level, message=message)))

    def raw(self, payload: BaseModel) -> None:
        self._write(payload)

    def _write(self, message: BaseModel) -> None:
        self.sink.write(message.model_dump_json() + "\n")
        self.sink.flush()
