from datetime import datetime, timezone

def utc_now() -> datetime:
    """Returns a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
