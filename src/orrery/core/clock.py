from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from orrery.core.constants import J2000_EPOCH_ISO

J2000_EPOCH: datetime = datetime.fromisoformat(J2000_EPOCH_ISO)


def simulated_seconds_since_j2000(now: Optional[datetime] = None) -> float:
    """
    Seconds elapsed between the J2000 epoch and `now` (default: current UTC time).
    Naive datetimes are taken as UTC.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return (now - J2000_EPOCH).total_seconds()
