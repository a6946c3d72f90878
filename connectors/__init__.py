from .base import PageFetcher
from .client import LiveKitClient, create_access_token
from .config import SourceConfig, merge_with_defaults, validate_config
from .engine import StreamDefinition, SyncContext, SyncEngine
from .messages import MessageEmitter
from .state_store import CursorStore
from .streams import AVAILABLE_STREAMS, get_stream

__all__ = [
    "PageFetcher",
    "LiveKitClient",
    "create_access_token",
    "SourceConfig",
    "merge_with_defaults",
    "validate_config",
    "StreamDefinition",
    "SyncContext",
    "SyncEngine",
    "MessageEmitter",
    "CursorStore",
    "AVAILABLE_STREAMS",
    "get_stream",
]
