from datetime import datetime, UTC

def now() -> datetime:
    return datetime.now(UTC)

def elapsed_seconds(since: datetime, at: datetime | None = None) -> int:
    """Secondes entières écoulées (jamais négatif, horloge qui recule comprise)."""
    delta = (at or now()) - since
    return max(0, int(delta.total_seconds()))
