from typing import Dict

from connectors.engine import StreamDefinition
from connectors.errors import StreamNotFoundError

from .events import EVENTS
from .participants import PARTICIPANTS
from .quality_metrics import QUALITY_METRICS
from .rooms import ROOMS
from .usage import USAGE

AVAILABLE_STREAMS: Dict[str, StreamDefinition] = {
    definition.name: definition for definition in (ROOMS, PARTICIPANTS, QUALITY_METRICS, EVENTS, USAGE)
}


def get_stream(name: str) -> StreamDefinition:
    try:
        return AVAILABLE_STREAMS[name]
    except KeyError as exc:
        raise StreamNotFoundError(name) from exc


__all__ = [
    "AVAILABLE_STREAMS",
    "EVENTS",
    "PARTICIPANTS",
    "QUALITY_METRICS",
    "ROOMS",
    "USAGE",
    "get_stream",
]
