from __future__ import annotations

from typing import AsyncIterator, Iterator

from connectors.engine import StreamDefinition, SyncContext
from connectors.models import RoomRecord
from connectors.pagination import paginate
from connectors.timeutil import to_epoch_ms
from connectors.walker import SourceItem


async def fetch_rooms(ctx: SyncContext) -> AsyncIterator[SourceItem]:
    async for page in paginate(ctx.fetcher, "/rooms", ctx.window(), ctx.page_size):
        for room in page:
            yield SourceItem(payload=room, room_id=room.get("sid"))


def transform_room(item: SourceItem, ctx: SyncContext) -> Iterator[RoomRecord]:
    room = item.payload
    yield RoomRecord(
        room_id=room.get("sid"),
        name=room.get("name"),
        timestamp=to_epoch_ms(room.get("created_at")),
        participant_count=room.get("num_participants"),
        created_at=room.get("created_at"),
        duration=room.get("duration"),
        active=room.get("active"),
        metadata=room.get("metadata") or {},
    )


ROOMS = StreamDefinition(
    name="rooms",
    fetch=fetch_rooms,
    transform=transform_room,
    record_model=RoomRecord,
    primary_key=[["room_id", "timestamp"]],
)
