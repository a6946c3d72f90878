from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional


class CursorStore:
    """Per-stream watermarks carried from one invocation to the next."""

    def __init__(self, state: Optional[Mapping[str, Any]] = None) -> None:
        self._state: Dict[str, Dict[str, Any]] = {}
        for stream, value in _unwrap(state).items():
            if isinstance(value, Mapping):
                self._state[stream] = dict(value)

    def stream_state(self, stream: str) -> Dict[str, Any]:
        return dict(self._state.get(stream, {}))

    def update(self, stream: str, state: Mapping[str, Any]) -> None:
        self._state[stream] = dict(state)

    def as_state(self) -> Dict[str, Dict[str, Any]]:
        return {stream: dict(value) for stream, value in self._state.items()}


def cursor_value(stream_state: Optional[Mapping[str, Any]], cursor_field: str) -> Optional[int]:
    """Stored watermark of one stream, or None when it has never synced."""
    value = (stream_state or {}).get(cursor_field)
    if value in (None, "", 0):
        return None
    return int(value)


def _unwrap(state: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    if not state:
        return {}
    # accept the envelope of an emitted STATE message as well as the bare mapping
    inner = state.get("data")
    if isinstance(inner, Mapping) and len(state) == 1:
        return inner
    return state


def load_state(path: Optional[str | Path]) -> CursorStore:
    if not path:
        return CursorStore()
    content = Path(path).read_text(encoding="utf-8").strip()
    return CursorStore(json.loads(content) if content else None)
