from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, AsyncIterator, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Type

import pendulum
from pydantic import BaseModel

from connectors.base import PageFetcher
from connectors.config import SourceConfig
from connectors.messages import MessageEmitter
from connectors.models import record_data
from connectors.pagination import PAGE_SIZE
from connectors.state_store import cursor_value
from connectors.timeutil import DAY_FORMAT, format_day, utc_now
from connectors.walker import LeafFailure, ResourceWalker, SourceItem, WalkItem
from core.logging import stream_context

logger = logging.getLogger(__name__)

FULL_REFRESH = "full_refresh"
INCREMENTAL = "incremental"
SYNC_MODES = (FULL_REFRESH, INCREMENTAL)


@dataclass
class SyncContext:
    """What a fetch strategy and a transform may see of a running sync."""

    stream: str
    fetcher: PageFetcher
    config: SourceConfig
    start_watermark: Optional[int] = None
    watermark: Optional[int] = None
    clock: Callable[[], datetime] = utc_now
    page_size: int = PAGE_SIZE
    emitter: Optional[MessageEmitter] = None

    def warn(self, message: str) -> None:
        if self.emitter is None:
            logger.warning(message, extra={"stream": self.stream})
            return
        self.emitter.log("WARN", message)

    @property
    def start_date(self) -> str:
        if self.start_watermark:
            return format_day(self.start_watermark)
        return pendulum.parse(self.config.start_date).format(DAY_FORMAT)

    @property
    def end_date(self) -> str:
        return pendulum.instance(self.clock()).in_timezone("UTC").format(DAY_FORMAT)

    def window(self) -> Dict[str, Any]:
        return {"from": self.start_date, "to": self.end_date}

    def walker(self) -> ResourceWalker:
        return ResourceWalker(self.fetcher, self.window(), page_size=self.page_size, clock=self.clock)


FetchStrategy = Callable[[SyncContext], AsyncIterator[WalkItem]]
Transform = Callable[[SourceItem, SyncContext], Iterable[BaseModel]]


@dataclass(frozen=True)
class StreamDefinition:
    name: str
    fetch: FetchStrategy
    transform: Transform
    record_model: Type[BaseModel]
    primary_key: List[List[str]]
    cursor_field: str = "timestamp"
    supported_sync_modes: Tuple[str, ...] = field(default=SYNC_MODES)

    def catalog_entry(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "json_schema": self.record_model.model_json_schema(),
            "supported_sync_modes": list(self.supported_sync_modes),
            "source_defined_cursor": True,
            "default_cursor_field": [self.cursor_field],
            "source_defined_primary_key": [list(key) for key in self.primary_key],
        }


class SyncEngine:
    """Runs one stream: traverse, transform, emit, then checkpoint.

    The STATE message is written once, after the traversal completes, and only
    when the watermark moved past the stored cursor. A full refresh reads from
    start_date but never moves the stored cursor backwards. A failure
    part way through leaves no STATE behind, so the next run re-emits whatever
    this one had already written (at-least-once delivery).
    """

    def __init__(
        self,
        definition: StreamDefinition,
        fetcher: PageFetcher,
        config: SourceConfig,
        state: Optional[Mapping[str, Any]] = None,
        emitter: Optional[MessageEmitter] = None,
        sync_mode: str = INCREMENTAL,
        clock: Callable[[], datetime] = utc_now,
        page_size: int = PAGE_SIZE,
    ) -> None:
        if sync_mode not in definition.supported_sync_modes:
            raise ValueError(f"Unsupported sync mode {sync_mode!r} for stream {definition.name}")
        self.definition = definition
        self.state: Dict[str, Any] = dict(state or {})
        self._emitter = emitter or MessageEmitter()
        self._sync_mode = sync_mode
        self._floor = cursor_value(self.state, definition.cursor_field)
        prior = self._floor if sync_mode == INCREMENTAL else None
        self.context = SyncContext(
            stream=definition.name,
            fetcher=fetcher,
            config=config,
            start_watermark=prior,
            watermark=prior,
            clock=clock,
            page_size=page_size,
            emitter=self._emitter,
        )

    @property
    def name(self) -> str:
        return self.definition.name

    def _advance(self, value: Optional[int]) -> None:
        if value is None:
            return
        current = self.context.watermark
        if current is None or value > current:
            self.context.watermark = value

    async def read(self) -> Dict[str, Any]:
        with stream_context(self.name):
            return await self._read()

    async def _read(self) -> Dict[str, Any]:
        display = self.name.replace("_", " ")
        self._emitter.log("INFO", f"Starting sync for {display} stream")
        try:
            self._emitter.log("INFO", f"Fetching {display} since {self.context.start_date}")
            emitted = 0
            async for item in self.definition.fetch(self.context):
                if isinstance(item, LeafFailure):
                    self._emitter.log("WARN", item.describe())
                    continue
                for record in self.definition.transform(item, self.context):
                    data = record_data(record)
                    self._emitter.record(self.name, data)
                    self._advance(data.get(self.definition.cursor_field))
                    emitted += 1
        except Exception as exc:
            self._emitter.log("ERROR", f"Error syncing {display}: {exc}")
            raise

        watermark = self.context.watermark
        if watermark is not None and (self._floor is None or watermark > self._floor):
            self.state = {**self.state, self.definition.cursor_field: watermark}
            self._emitter.state(self.name, self.state)
        logger.debug("Stream finished", extra={"stream": self.name, "records": emitted})
        self._emitter.log("INFO", f"Completed sync for {display} stream")
        return self.state
