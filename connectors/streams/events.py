from __future__ import annotations

from typing import Any, AsyncIterator, Iterator, Optional

from connectors.engine import StreamDefinition, SyncContext
from connectors.models import EventRecord
from connectors.pagination import paginate
from connectors.timeutil import to_epoch_ms
from connectors.walker import SourceItem

SEVERITY_MAP = {
    "debug": "info",
    "info": "info",
    "notice": "info",
    "warning": "warning",
    "warn": "warning",
    "error": "error",
    "alert": "critical",
    "critical": "critical",
    "emergency": "critical",
}


def map_severity(level: Optional[str]) -> str:
    return SEVERITY_MAP.get(str(level or "info").lower(), "info")


def _optional_str(value: Any) -> Optional[str]:
    return None if value in (None, "") else str(value)


async def fetch_events(ctx: SyncContext) -> AsyncIterator[SourceItem]:
    async for page in paginate(ctx.fetcher, "/events", ctx.window(), ctx.page_size):
        for event in page:
            yield SourceItem(payload=event, room_id=event.get("room_id"))


def transform_event(item: SourceItem, ctx: SyncContext) -> Iterator[EventRecord]:
    event = item.payload
    timestamp = to_epoch_ms(event.get("timestamp"))
    # already synced by an earlier page or run
    if ctx.watermark and timestamp is not None and timestamp <= ctx.watermark:
        return
    yield EventRecord(
        event_id=str(event.get("id")),
        room_id=_optional_str(event.get("room_id")),
        participant_id=_optional_str(event.get("participant_id")),
        timestamp=timestamp,
        event_time=event.get("timestamp"),
        event_type=event.get("type"),
        severity=map_severity(event.get("level")),
        message=event.get("message") or "",
        metadata=event.get("metadata") or {},
        source=event.get("source") or "livekit",
        ip_address=event.get("ip_address") or None,
        region=event.get("region") or None,
    )


EVENTS = StreamDefinition(
    name="events",
    fetch=fetch_events,
    transform=transform_event,
    record_model=EventRecord,
    primary_key=[["event_id"]],
)
