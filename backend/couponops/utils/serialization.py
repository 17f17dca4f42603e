from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional


def iso(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 in UTC with a trailing Z; naive values (SQLite) are taken as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace('+00:00', 'Z')
