from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable


@dataclass(frozen=True)
class CallRecord:
    id: str
    caller_id: str
    receiver_id: str
    timestamp: datetime
    duration_seconds: int
    was_masked: bool
    booking_id: str | None = None


def summarize_calls(calls: Iterable[CallRecord]) -> dict:
    """Admin dashboard numbers for relayed calls."""
    calls = list(calls)
    total = len(calls)
    masked = sum(1 for c in calls if c.was_masked)
    by_hour = Counter(c.timestamp.hour for c in calls)

    peak_hour = None
    if by_hour:
        # Earliest hour wins a tie.
        peak_hour = min(by_hour, key=lambda h: (-by_hour[h], h))

    return {
        "total_calls": total,
        "masked_calls": masked,
        "unmasked_calls": total - masked,
        "masking_percentage": (masked / total) * 100 if total else 0.0,
        "average_duration_seconds": round(sum(c.duration_seconds for c in calls) / total) if total else 0,
        "calls_by_hour": dict(sorted(by_hour.items())),
        "peak_hour": peak_hour,
    }
