"""In-memory metrics for notification feed derivation."""

import logging
from collections import defaultdict, deque
from typing import Optional

logger = logging.getLogger(__name__)

# Samples kept per series; older ones drop out of the averages and percentiles.
SAMPLE_WINDOW = 1000


class NotificationMetrics:
    """Counts derivation runs, their output and failures per process."""

    def __init__(self, sample_window: int = SAMPLE_WINDOW):
        self._run_count = 0
        self._latencies: deque[int] = deque(maxlen=sample_window)
        self._fresh_counts: deque[int] = deque(maxlen=sample_window)
        self._unread_counts: deque[int] = deque(maxlen=sample_window)
        self._error_counts = defaultdict(int)

    def record_derivation(
        self,
        viewer_id: str,
        fresh_count: int,
        merged_count: int,
        unread_count: int,
        duration_ms: int,
    ) -> None:
        """Record a completed derivation.

        Args:
            viewer_id: Employee the feed was derived for
            fresh_count: Notifications produced before merging
            merged_count: Size of the merged feed
            unread_count: Unread entries in the merged feed
            duration_ms: Time spent loading, deriving and saving
        """
        self._run_count += 1
        self._latencies.append(duration_ms)
        self._fresh_counts.append(fresh_count)
        self._unread_counts.append(unread_count)

        logger.debug(
            "Derivation recorded",
            extra={
                "viewer_id": viewer_id,
                "fresh_count": fresh_count,
                "merged_count": merged_count,
                "unread_count": unread_count,
                "duration_ms": duration_ms,
            },
        )

    def record_error(self, error_code: str, viewer_id: Optional[str] = None) -> None:
        self._error_counts[error_code] += 1
        logger.warning(
            "Derivation error recorded",
            extra={"error_code": error_code, "viewer_id": viewer_id},
        )

    def get_metrics(self) -> dict:
        total_errors = sum(self._error_counts.values())

        p50_latency = 0
        p95_latency = 0
        if self._latencies:
            ordered = sorted(self._latencies)
            p50_latency = ordered[len(ordered) // 2]
            p95_latency = ordered[int(len(ordered) * 0.95)]

        avg_fresh = 0
        if self._fresh_counts:
            avg_fresh = sum(self._fresh_counts) / len(self._fresh_counts)

        avg_unread = 0
        if self._unread_counts:
            avg_unread = sum(self._unread_counts) / len(self._unread_counts)

        return {
            "total_runs": self._run_count,
            "total_errors": total_errors,
            "error_rate": total_errors / self._run_count if self._run_count else 0,
            "p50_latency_ms": p50_latency,
            "p95_latency_ms": p95_latency,
            "avg_fresh_count": avg_fresh,
            "avg_unread_count": avg_unread,
            "error_counts": dict(self._error_counts),
        }


metrics = NotificationMetrics()
