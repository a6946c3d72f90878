from __future__ import annotations

import logging
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional

from connectors.base import PageFetcher

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


def page_items(response: Mapping[str, Any]) -> List[Dict[str, Any]]:
    return list((response or {}).get("items") or [])


async def paginate(
    fetcher: PageFetcher,
    path: str,
    params: Optional[Mapping[str, Any]] = None,
    page_size: int = PAGE_SIZE,
) -> AsyncIterator[List[Dict[str, Any]]]:
    """Yield successive non-empty pages of ``path`` using limit/offset paging.

    Stops after an empty page or one shorter than ``page_size``. Fetch errors
    propagate to the caller untouched.
    """
    query: Dict[str, Any] = dict(params or {})
    query["limit"] = page_size
    offset = 0
    while True:
        query["offset"] = offset
        logger.debug("Fetching page", extra={"path": path, "offset": offset})
        items = page_items(await fetcher.fetch(path, dict(query)))
        if not items:
            break
        yield items
        offset += len(items)
        if len(items) < page_size:
            break
