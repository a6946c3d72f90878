from __future__ import annotations

import hashlib
from typing import Any

KEY_DELIMITER = ":"
IDENTITY_LENGTH = 32


def derive_identity(*parts: Any) -> str:
    """Stable identifier for records the API gives no natural key."""
    composite = KEY_DELIMITER.join(str(part) for part in parts)
    return hashlib.sha256(composite.encode("utf-8")).hexdigest()[:IDENTITY_LENGTH]
