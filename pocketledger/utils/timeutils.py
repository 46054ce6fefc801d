# pocketledger/utils/timeutils.py
from datetime import datetime, timezone

def utcnow() -> datetime:
    """Timezone-aware now; every DateTime column is declared with timezone=True."""
    return datetime.now(timezone.utc)
