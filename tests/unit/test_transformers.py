from datetime import datetime, timezone

import pytest

from connectors.config import merge_with_defaults
from connectors.engine import SyncContext
from connectors.streams.events import map_severity, transform_event
from connectors.streams.participants import lifecycle_state, participant_duration, transform_participant
from connectors.streams.quality_metrics import classify_connection_quality, transform_metrics
from connectors.streams.rooms import transform_room
from connectors.streams.usage import transform_usage_day
from connectors.timeutil import to_epoch_ms
from connectors.walker import SourceItem

FETCHED_AT = datetime(2025, 1, 20, 12, 0, tzinfo=timezone.utc)


def _context(watermark=None) -> SyncContext:
    config = merge_with_defaults({"api_key": "key", "api_secret": "secret", "start_date": "2025-01-01"})
    return SyncContext(
        stream="test",
        fetcher=None,
        config=config,
        start_watermark=watermark,
        watermark=watermark,
        clock=lambda: FETCHED_AT,
    )


@pytest.mark.parametrize(
    "quality, expected",
    [(90, "excellent"), (80, "excellent"), (70, "good"), (50, "good"), (30, "poor"), (0, "poor"), (None, "unknown")],
)
def test_connection_quality_classification(quality, expected):
    assert classify_connection_quality(quality) == expected


@pytest.mark.parametrize(
    "level, expected",
    [
        ("debug", "info"),
        ("NOTICE", "info"),
        ("Warn", "warning"),
        ("warning", "warning"),
        ("ERROR", "error"),
        ("alert", "critical"),
        ("Emergency", "critical"),
        ("critical", "critical"),
        ("verbose", "info"),
        (None, "info"),
    ],
)
def test_severity_mapping(level, expected):
    assert map_severity(level) == expected


def test_room_transform_passthrough():
    item = SourceItem(
        payload={
            "sid": "RM_1",
            "name": "standup",
            "created_at": "2025-01-15T10:00:00Z",
            "num_participants": 4,
            "duration": 600,
            "active": False,
        }
    )
    [record] = list(transform_room(item, _context()))
    assert record.room_id == "RM_1"
    assert record.timestamp == to_epoch_ms("2025-01-15T10:00:00Z") == 1736935200000
    assert record.participant_count == 4
    assert record.metadata == {}
    assert record.active is False


def test_participant_duration_is_floored_seconds():
    participant = {"joined_at": "2025-01-15T10:00:00.000Z", "left_at": "2025-01-15T10:01:30.900Z"}
    assert participant_duration(participant) == 90
    assert participant_duration({"joined_at": "2025-01-15T10:00:00Z"}) is None
    assert participant_duration({"left_at": "2025-01-15T10:00:00Z"}) is None


def test_participant_lifecycle_state():
    assert lifecycle_state({"joined_at": "2025-01-15T10:00:00Z"}) == "joined"
    assert lifecycle_state({"left_at": "2025-01-15T11:00:00Z"}) == "left"
    assert lifecycle_state({"left_at": "2025-01-15T11:00:00Z", "error": "ICE failed"}) == "disconnected"


def test_participant_transform_defaults():
    item = SourceItem(
        payload={"sid": "PA_1", "identity": "alice", "joined_at": "2025-01-15T10:00:00Z", "publisher": 1},
        room_id="RM_1",
    )
    [record] = list(transform_participant(item, _context()))
    assert record.name == "alice"
    assert record.room_id == "RM_1"
    assert record.state == "joined"
    assert record.duration is None
    assert record.left_at is None
    assert record.is_publisher is True
    assert record.is_subscriber is False
    assert (record.user_agent, record.ip_address, record.region) == ("", "", "")


def test_metrics_transform_emits_one_record_per_present_track():
    item = SourceItem(
        payload={
            "audio": {"latency": 20, "jitter": 3, "level": 0.4, "quality": 90},
            "screen_share": {"frame_rate": 15, "resolution": {"width": 1920, "height": 1080}, "quality": 40},
        },
        room_id="RM_1",
        participant_id="PA_1",
        fetched_at=FETCHED_AT,
    )
    records = list(transform_metrics(item, _context()))
    assert [record.track_type for record in records] == ["audio", "screen_share"]
    audio, screen = records
    assert audio.packet_loss == 0 and audio.bitrate == 0
    assert audio.audio_level == 0.4
    assert audio.video_frame_rate is None and audio.video_resolution_width is None
    assert audio.connection_quality == "excellent"
    assert screen.audio_level is None
    assert (screen.video_resolution_width, screen.video_resolution_height) == (1920, 1080)
    assert screen.connection_quality == "poor"
    assert audio.timestamp == screen.timestamp == int(FETCHED_AT.timestamp() * 1000)
    assert audio.collected_at == "2025-01-20T12:00:00.000Z"
    assert audio.metric_id != screen.metric_id


def test_metrics_transform_video_defaults_missing_resolution():
    item = SourceItem(payload={"video": {"bitrate": 500}}, room_id="RM_1", participant_id="PA_1", fetched_at=FETCHED_AT)
    [record] = list(transform_metrics(item, _context()))
    assert record.video_frame_rate == 0
    assert record.video_resolution_width == 0
    assert record.connection_quality == "unknown"


def test_event_transform_skips_events_at_or_before_watermark():
    watermark = to_epoch_ms("2025-01-15T10:00:00Z")
    ctx = _context(watermark)
    older = SourceItem(payload={"id": "EV_1", "timestamp": "2025-01-15T10:00:00Z", "type": "room_started"})
    newer = SourceItem(payload={"id": "EV_2", "timestamp": "2025-01-15T10:00:01Z", "type": "room_finished"})
    assert list(transform_event(older, ctx)) == []
    [record] = list(transform_event(newer, ctx))
    assert record.event_id == "EV_2"
    assert record.severity == "info"
    assert record.source == "livekit"
    assert record.room_id is None


def test_usage_transform_skips_non_positive_regional_values():
    day = {
        "date": "2025-01-15",
        "participant_minutes": 120,
        "regions": {"us-west": {"participant_minutes": 80, "recording_minutes": 0, "egress_bandwidth": -1}},
    }
    records = list(transform_usage_day(SourceItem(payload=day), _context()))
    regional = [record for record in records if record.region != "global"]
    global_records = [record for record in records if record.region == "global"]
    assert [record.resource_type for record in regional] == ["participant_minutes"]
    assert len(global_records) == 4
    assert {record.unit for record in global_records} == {"minutes", "GB"}
    assert all(record.timestamp == to_epoch_ms("2025-01-15") for record in records)


def test_usage_transform_skips_day_at_watermark():
    ctx = _context(to_epoch_ms("2025-01-15"))
    day = {"date": "2025-01-15", "participant_minutes": 10, "regions": {"eu": {"participant_minutes": 5}}}
    assert list(transform_usage_day(SourceItem(payload=day), ctx)) == []
