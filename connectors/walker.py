from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, AsyncIterator, Callable, Dict, List, Mapping, Optional, Union

from connectors.base import PageFetcher
from connectors.pagination import PAGE_SIZE, paginate
from connectors.timeutil import utc_now

logger = logging.getLogger(__name__)


@dataclass
class SourceItem:
    """A raw API item plus the parent identifiers it was reached through."""

    payload: Dict[str, Any]
    room_id: Optional[str] = None
    participant_id: Optional[str] = None
    fetched_at: Optional[datetime] = None


@dataclass
class LeafFailure:
    room_id: str
    participant_id: str
    error: BaseException

    def describe(self) -> str:
        return (
            f"Error fetching metrics for participant {self.participant_id} "
            f"in room {self.room_id}: {self.error}"
        )


@dataclass
class LeafResult:
    room_id: str
    participant_id: str
    value: Optional[Dict[str, Any]] = None
    error: Optional[BaseException] = None
    fetched_at: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class LeafBatch:
    successes: List[SourceItem] = field(default_factory=list)
    failures: List[LeafFailure] = field(default_factory=list)

    def add(self, result: LeafResult) -> None:
        if result.ok:
            self.successes.append(
                SourceItem(
                    payload=result.value or {},
                    room_id=result.room_id,
                    participant_id=result.participant_id,
                    fetched_at=result.fetched_at,
                )
            )
        else:
            self.failures.append(LeafFailure(result.room_id, result.participant_id, result.error))


WalkItem = Union[SourceItem, LeafFailure]


class ResourceWalker:
    """Walks rooms -> participants -> per-participant metrics.

    Rooms pages and participant pages gate the rest of the traversal, so their
    errors propagate. A metrics fetch only affects its own participant and is
    reported back as a ``LeafFailure`` instead.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        window: Mapping[str, Any],
        page_size: int = PAGE_SIZE,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._fetcher = fetcher
        self._window = dict(window)
        self._page_size = page_size
        self._clock = clock

    async def rooms(self, active_only: bool = False) -> AsyncIterator[Dict[str, Any]]:
        params = dict(self._window)
        if active_only:
            params["active"] = True
        async for page in paginate(self._fetcher, "/rooms", params, self._page_size):
            for room in page:
                yield room

    async def participant_pages(self, room_id: str) -> AsyncIterator[List[Dict[str, Any]]]:
        async for page in paginate(self._fetcher, f"/rooms/{room_id}/participants", None, self._page_size):
            yield page

    async def participants(self) -> AsyncIterator[SourceItem]:
        async for room in self.rooms():
            room_id = room.get("sid")
            logger.info("Fetching participants for room %s", room_id)
            async for page in self.participant_pages(room_id):
                for participant in page:
                    yield SourceItem(payload=participant, room_id=room_id)

    async def fetch_leaf(self, room_id: str, participant_id: str) -> LeafResult:
        path = f"/rooms/{room_id}/participants/{participant_id}/metrics"
        try:
            body = await self._fetcher.fetch(path)
        except Exception as exc:
            return LeafResult(room_id, participant_id, error=exc)
        return LeafResult(room_id, participant_id, value=body or {}, fetched_at=self._clock())

    async def collect_leaves(self, room_id: str, participants: List[Dict[str, Any]]) -> LeafBatch:
        batch = LeafBatch()
        for participant in participants:
            batch.add(await self.fetch_leaf(room_id, participant.get("sid")))
        return batch

    async def participant_metrics(self) -> AsyncIterator[WalkItem]:
        async for room in self.rooms(active_only=True):
            room_id = room.get("sid")
            logger.info("Fetching quality metrics for room %s", room_id)
            async for page in self.participant_pages(room_id):
                batch = await self.collect_leaves(room_id, page)
                for item in batch.successes:
                    yield item
                for failure in batch.failures:
                    yield failure
