# jobdesk/utils.py
from datetime import datetime, timezone
from typing import Optional


def parse_dt(val) -> Optional[datetime]:
    """Parse an ISO-8601 string (date or datetime, "Z" or offset allowed) into naive UTC."""
    if val is None or val == "":
        return None
    if isinstance(val, datetime):
        dt = val
    else:
        try:
            dt = datetime.fromisoformat(str(val).strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt else None


def to_int(val):
    try:
        return int(val) if str(val).strip() else None
    except (TypeError, ValueError):
        return None
