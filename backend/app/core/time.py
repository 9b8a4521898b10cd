"""Clock helpers shared by models and file naming."""

from datetime import UTC, datetime
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(UTC)


def epoch_millis(moment: Optional[datetime] = None) -> int:
    """Milliseconds since the epoch; stored invoice PDFs use it to keep names unique."""
    moment = moment or utc_now()
    return int(moment.timestamp() * 1000)
