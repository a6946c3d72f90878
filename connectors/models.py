from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class RoomRecord(BaseModel):
    room_id: str
    name: Optional[str] = None
    timestamp: Optional[int] = None
    participant_count: Optional[int] = None
    created_at: Optional[Any] = None
    duration: Optional[float] = None
    active: Optional[bool] = None
    metadata: Any = Field(default_factory=dict)


class ParticipantRecord(BaseModel):
    participant_id: str
    room_id: str
    timestamp: Optional[int] = None
    identity: Optional[str] = None
    name: Optional[str] = None
    joined_at: Optional[Any] = None
    left_at: Optional[Any] = None
    duration: Optional[int] = None
    state: str
    is_publisher: bool = False
    is_subscriber: bool = False
    metadata: Any = Field(default_factory=dict)
    user_agent: str = ""
    ip_address: str = ""
    region: str = ""


class QualityMetricRecord(BaseModel):
    metric_id: str
    room_id: str
    participant_id: str
    timestamp: int
    collected_at: str
    latency: float = 0
    packet_loss: float = 0
    jitter: float = 0
    bitrate: float = 0
    audio_level: Optional[float] = None
    video_frame_rate: Optional[float] = None
    video_resolution_width: Optional[int] = None
    video_resolution_height: Optional[int] = None
    track_type: str
    connection_quality: str


class EventRecord(BaseModel):
    event_id: str
    room_id: Optional[str] = None
    participant_id: Optional[str] = None
    timestamp: Optional[int] = None
    event_time: Optional[Any] = None
    event_type: Optional[str] = None
    severity: str
    message: str = ""
    metadata: Any = Field(default_factory=dict)
    source: str = "livekit"
    ip_address: Optional[str] = None
    region: Optional[str] = None


class UsageRecord(BaseModel):
    usage_id: str
    timestamp: int
    date: str
    resource_type: str
    unit: str
    quantity: float = 0
    room_count: int = 0
    participant_count: int = 0
    participant_minutes: float = 0
    recording_minutes: float = 0
    egress_bandwidth: float = 0
    ingress_bandwidth: float = 0
    region: str


def record_data(record: BaseModel) -> Dict[str, Any]:
    return record.model_dump(mode="json")
