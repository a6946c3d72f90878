from __future__ import annotations

from typing import Any, AsyncIterator, Dict, Iterator, Optional

from connectors.engine import StreamDefinition, SyncContext
from connectors.identity import derive_identity
from connectors.models import UsageRecord
from connectors.timeutil import to_epoch_ms
from connectors.walker import SourceItem

GLOBAL_REGION = "global"

RESOURCE_UNITS = {
    "participant_minutes": "minutes",
    "recording_minutes": "minutes",
    "egress_bandwidth": "GB",
    "ingress_bandwidth": "GB",
}


def usage_id(date: str, resource_type: str, region: str = GLOBAL_REGION) -> str:
    return derive_identity(date, resource_type, region)


async def fetch_daily_usage(ctx: SyncContext) -> AsyncIterator[SourceItem]:
    # not paginated; one response holds the whole daily breakdown
    response = await ctx.fetcher.fetch("/usage", ctx.window())
    for day in (response or {}).get("daily") or []:
        yield SourceItem(payload=day)


def _usage_record(
    date: str, timestamp: int, resource_type: str, quantity: Any, totals: Dict[str, Any], region: str
) -> UsageRecord:
    return UsageRecord(
        usage_id=usage_id(date, resource_type, region),
        timestamp=timestamp,
        date=date,
        resource_type=resource_type,
        unit=RESOURCE_UNITS[resource_type],
        quantity=quantity or 0,
        room_count=totals.get("room_count") or 0,
        participant_count=totals.get("participant_count") or 0,
        participant_minutes=totals.get("participant_minutes") or 0,
        recording_minutes=totals.get("recording_minutes") or 0,
        egress_bandwidth=totals.get("egress_bandwidth") or 0,
        ingress_bandwidth=totals.get("ingress_bandwidth") or 0,
        region=region,
    )


def _positive(value: Optional[float]) -> bool:
    return bool(value) and value > 0


def transform_usage_day(item: SourceItem, ctx: SyncContext) -> Iterator[UsageRecord]:
    day = item.payload
    date = day.get("date")
    try:
        timestamp = to_epoch_ms(date)
    except ValueError:
        timestamp = None
    if timestamp is None:
        ctx.warn(f"Skipping usage day without a valid date: {date!r}")
        return
    if ctx.watermark and timestamp <= ctx.watermark:
        return
    for region, totals in (day.get("regions") or {}).items():
        for resource_type in RESOURCE_UNITS:
            value = (totals or {}).get(resource_type)
            if _positive(value):
                yield _usage_record(date, timestamp, resource_type, value, totals, region)
    for resource_type in RESOURCE_UNITS:
        yield _usage_record(date, timestamp, resource_type, day.get(resource_type), day, GLOBAL_REGION)


USAGE = StreamDefinition(
    name="usage",
    fetch=fetch_daily_usage,
    transform=transform_usage_day,
    record_model=UsageRecord,
    primary_key=[["usage_id"]],
)
