from __future__ import annotations

import abc
from typing import Any, Dict, Mapping, Optional


class PageFetcher(abc.ABC):
    """One authenticated GET against the platform API."""

    @abc.abstractmethod
    async def fetch(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Return the decoded JSON body for ``path``."""
