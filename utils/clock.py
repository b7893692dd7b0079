from datetime import datetime, timezone


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp; every datetime column is declared with a timezone."""
    return datetime.now(timezone.utc)
