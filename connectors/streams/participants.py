from __future__ import annotations

from typing import Any, AsyncIterator, Dict, Iterator, Optional

from connectors.engine import StreamDefinition, SyncContext
from connectors.models import ParticipantRecord
from connectors.timeutil import to_epoch_ms
from connectors.walker import SourceItem


async def fetch_participants(ctx: SyncContext) -> AsyncIterator[SourceItem]:
    async for item in ctx.walker().participants():
        yield item


def participant_duration(participant: Dict[str, Any]) -> Optional[int]:
    joined = to_epoch_ms(participant.get("joined_at"))
    left = to_epoch_ms(participant.get("left_at"))
    if joined is None or left is None:
        return None
    return (left - joined) // 1000


def lifecycle_state(participant: Dict[str, Any]) -> str:
    if not participant.get("left_at"):
        return "joined"
    return "disconnected" if participant.get("error") else "left"


def transform_participant(item: SourceItem, ctx: SyncContext) -> Iterator[ParticipantRecord]:
    participant = item.payload
    yield ParticipantRecord(
        participant_id=participant.get("sid"),
        room_id=item.room_id,
        timestamp=to_epoch_ms(participant.get("joined_at")),
        identity=participant.get("identity"),
        name=participant.get("name") or participant.get("identity"),
        joined_at=participant.get("joined_at"),
        left_at=participant.get("left_at") or None,
        duration=participant_duration(participant),
        state=lifecycle_state(participant),
        is_publisher=bool(participant.get("publisher")),
        is_subscriber=bool(participant.get("subscriber")),
        metadata=participant.get("metadata") or {},
        user_agent=participant.get("user_agent") or "",
        ip_address=participant.get("ip_address") or "",
        region=participant.get("region") or "",
    )


PARTICIPANTS = StreamDefinition(
    name="participants",
    fetch=fetch_participants,
    transform=transform_participant,
    record_model=ParticipantRecord,
    primary_key=[["participant_id", "room_id", "timestamp"]],
)
