"""Prometheus metrics definitions for bucketwire.

All metrics use the ``bucketwire_`` prefix. Nothing is registered in the
global registry until ``init_metrics()`` is called; until then
``record_operation`` is a no-op, so a library user who does not enable
metrics never pays for them.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

_initialized: bool = False

# ---------------------------------------------------------------------------
# Operation counter  (labels: operation, outcome)
# ---------------------------------------------------------------------------
operations_total: Counter | None = None

# ---------------------------------------------------------------------------
# Operation latency  (labels: operation)
# ---------------------------------------------------------------------------
operation_duration_seconds: Histogram | None = None


def init_metrics() -> None:
    """Create and register all Prometheus metrics. Safe to call twice."""
    global _initialized
    global operations_total, operation_duration_seconds

    if _initialized:
        return

    operations_total = Counter(
        "bucketwire_operations_total",
        "Total dispatched operations by name and outcome",
        ["operation", "outcome"],
    )

    operation_duration_seconds = Histogram(
        "bucketwire_operation_duration_seconds",
        "Wall-clock time of dispatched operations",
        ["operation"],
    )

    _initialized = True


def record_operation(operation: str, outcome: str, duration: float) -> None:
    """Count one finished operation.

    Args:
        operation: The request name (e.g. "GetObject").
        outcome: "success", "network_error", "api_error" or "decode_error".
        duration: Seconds spent in the transport.
    """
    if operations_total is not None:
        operations_total.labels(operation=operation, outcome=outcome).inc()
    if operation_duration_seconds is not None:
        operation_duration_seconds.labels(operation=operation).observe(duration)
