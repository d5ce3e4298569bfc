from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal, Optional

EntityStatus = Literal["ACTIVE", "INACTIVE"]


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored without tzinfo; aware inputs are shifted to UTC first."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# bcrypt refuses secrets longer than this many bytes.
BCRYPT_MAX_BYTES = 72


def check_password_length(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return value
