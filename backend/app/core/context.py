from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class SessionContext:
    """Authenticated request identity. user_id partitions every query."""
    user_id: int
    username: str
    token: str
    # None for sessions that never expire (scripts)
    expires_at: Optional[datetime] = None
