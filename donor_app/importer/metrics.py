"""Prometheus metrics helpers for the donor importer."""

from __future__ import annotations

from typing import Literal, Mapping

from prometheus_client import Counter, Gauge, Histogram

_import_runs_counter = Counter(
    "donor_import_runs_total",
    "Donor import runs by final status.",
    ["status"],
)
_import_rows_counter = Counter(
    "donor_import_rows_total",
    "Donor import rows by outcome.",
    ["outcome"],
)
_import_duration = Histogram(
    "donor_import_duration_seconds",
    "Duration of donor import runs in seconds.",
    buckets=(0.5, 1, 2, 5, 10, 30, 60, 120, 300, 600),
)
_active_imports_gauge = Gauge(
    "donor_import_active_runs",
    "Donor imports currently running in this process.",
)


def record_import_started() -> None:
    _active_imports_gauge.inc()


def record_import_finished(
    *,
    status: Literal["completed", "error", "cancelled"],
    duration_seconds: float,
    counts: Mapping[str, int] | None = None,
) -> None:
    """Capture the outcome of one import run."""

    _active_imports_gauge.dec()
    _import_runs_counter.labels(status=status).inc()
    _import_duration.observe(max(duration_seconds, 0.0))
    for outcome, count in (counts or {}).items():
        if count:
            _import_rows_counter.labels(outcome=outcome).inc(count)
