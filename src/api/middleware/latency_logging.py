"""Request latency logging middleware and the rolling stats behind /health/latency."""

import logging
import re
import time
from collections import defaultdict, deque
from statistics import fmean
from typing import Callable

from fastapi import Request, Response

logger = logging.getLogger(__name__)

# Thresholds for log levels (in milliseconds)
SLOW_REQUEST_THRESHOLD_MS = 1000
VERY_SLOW_REQUEST_THRESHOLD_MS = 3000

HEALTH_PATHS = ("/health", "/health/ready", "/health/latency")

_NUMERIC_SEGMENT = re.compile(r"/\d+(?=/|$)")


def route_key(path: str) -> str:
    """Collapse numeric ids so /api/jobs/12 and /api/jobs/13 share one key."""
    return _NUMERIC_SEGMENT.sub("/{id}", path)


def summarize(latencies: list[float]) -> dict:
    """Count, mean and 95th percentile of a set of latencies in ms."""
    if not latencies:
        return {"count": 0, "avg_ms": 0.0, "p95_ms": 0.0}
    ordered = sorted(latencies)
    p95 = ordered[min(int(len(ordered) * 0.95), len(ordered) - 1)]
    return {"count": len(ordered), "avg_ms": round(fmean(ordered), 2), "p95_ms": round(p95, 2)}


class LatencyStats:
    """Rolling window of the most recent request latencies."""

    def __init__(self, window: int = 1000) -> None:
        self._samples: deque[tuple[str, float]] = deque(maxlen=window)

    def record(self, path: str, latency_ms: float) -> None:
        self._samples.append((route_key(path), latency_ms))

    def summary(self) -> dict:
        """Overall figures plus one entry per route key."""
        by_route: dict[str, list[float]] = defaultdict(list)
        for route, latency in self._samples:
            by_route[route].append(latency)
        return {
            "overall": summarize([latency for _, latency in self._samples]),
            "by_path": {route: summarize(values) for route, values in sorted(by_route.items())},
        }


_latency_stats: LatencyStats | None = None


def get_latency_stats() -> LatencyStats:
    """Get or create the global latency stats instance."""
    global _latency_stats
    if _latency_stats is None:
        _latency_stats = LatencyStats()
    return _latency_stats


async def latency_logging_with_stats_middleware(
    request: Request, call_next: Callable
) -> Response:
    """Log request latency and record it for /health/latency.

    Health checks are neither recorded nor logged unless slow.
    """
    start_time = time.perf_counter()
    path = request.url.path
    response = None

    try:
        response = await call_next(request)
        return response
    finally:
        latency_ms = (time.perf_counter() - start_time) * 1000
        status_code = response.status_code if response is not None else 500
        log_msg = f"{request.method} {path} - {status_code} - {latency_ms:.2f}ms"

        if path in HEALTH_PATHS:
            if latency_ms > 100:
                logger.debug(log_msg)
        else:
            get_latency_stats().record(path, latency_ms)
            if status_code >= 500:
                logger.error(log_msg)
            elif latency_ms > VERY_SLOW_REQUEST_THRESHOLD_MS:
                logger.error(f"VERY SLOW REQUEST: {log_msg}")
            elif latency_ms > SLOW_REQUEST_THRESHOLD_MS:
                logger.warning(f"SLOW REQUEST: {log_msg}")
            elif status_code >= 400:
                logger.warning(log_msg)
            else:
                logger.info(log_msg)
