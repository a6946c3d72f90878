from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

import pendulum

DAY_FORMAT = "YYYY-MM-DD"


def to_epoch_ms(value: Any) -> Optional[int]:
    """Epoch milliseconds for an ISO string, a datetime or a numeric ms value."""
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise TypeError(f"Cannot convert {value!r} to a timestamp")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        return int(round(value.timestamp() * 1000))
    parsed = pendulum.parse(str(value), tz="UTC")
    return int(round(parsed.timestamp() * 1000))


def format_day(epoch_ms: int) -> str:
    return pendulum.from_timestamp(epoch_ms / 1000, tz="UTC").format(DAY_FORMAT)


def utc_now() -> datetime:
    return pendulum.now("UTC")


def isoformat_ms(moment: datetime) -> str:
    """ISO-8601 with millisecond precision and a ``Z`` suffix."""
    moment = pendulum.instance(moment).in_timezone("UTC")
    return moment.format("YYYY-MM-DD[T]HH:mm:ss.SSS") + "Z"
