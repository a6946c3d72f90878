from __future__ import annotations

from typing import Any, AsyncIterator, Dict, Iterator, Optional

from connectors.engine import StreamDefinition, SyncContext
from connectors.identity import derive_identity
from connectors.models import QualityMetricRecord
from connectors.timeutil import isoformat_ms, to_epoch_ms, utc_now
from connectors.walker import SourceItem, WalkItem

TRACK_TYPES = ("audio", "video", "screen_share")


def classify_connection_quality(quality: Optional[float]) -> str:
    if quality is None:
        return "unknown"
    if quality >= 80:
        return "excellent"
    if quality >= 50:
        return "good"
    return "poor"


def metric_id(room_id: str, participant_id: str, timestamp: int, track_type: str) -> str:
    return derive_identity(room_id, participant_id, timestamp, track_type)


async def fetch_participant_metrics(ctx: SyncContext) -> AsyncIterator[WalkItem]:
    async for item in ctx.walker().participant_metrics():
        yield item


def _track_fields(track_type: str, track: Dict[str, Any]) -> Dict[str, Any]:
    if track_type == "audio":
        return {
            "audio_level": track.get("level") or 0,
            "video_frame_rate": None,
            "video_resolution_width": None,
            "video_resolution_height": None,
        }
    resolution = track.get("resolution") or {}
    return {
        "audio_level": None,
        "video_frame_rate": track.get("frame_rate") or 0,
        "video_resolution_width": resolution.get("width") or 0,
        "video_resolution_height": resolution.get("height") or 0,
    }


def transform_metrics(item: SourceItem, ctx: SyncContext) -> Iterator[QualityMetricRecord]:
    collected = item.fetched_at or utc_now()
    timestamp = to_epoch_ms(collected)
    collected_at = isoformat_ms(collected)
    for track_type in TRACK_TYPES:
        track = item.payload.get(track_type)
        if not track:
            continue
        yield QualityMetricRecord(
            metric_id=metric_id(item.room_id, item.participant_id, timestamp, track_type),
            room_id=item.room_id,
            participant_id=item.participant_id,
            timestamp=timestamp,
            collected_at=collected_at,
            latency=track.get("latency") or 0,
            packet_loss=track.get("packet_loss") or 0,
            jitter=track.get("jitter") or 0,
            bitrate=track.get("bitrate") or 0,
            track_type=track_type,
            connection_quality=classify_connection_quality(track.get("quality")),
            **_track_fields(track_type, track),
        )


QUALITY_METRICS = StreamDefinition(
    name="quality_metrics",
    fetch=fetch_participant_metrics,
    transform=transform_metrics,
    record_model=QualityMetricRecord,
    primary_key=[["metric_id"]],
)
