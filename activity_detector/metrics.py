"""Prometheus metrics for detection runs.

A batch run is too short-lived to be scraped, so the metrics live on their
own registry and are written to a node-exporter textfile after the run
(``--metrics-file``).  Counters accumulate for the life of the process.
"""

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, write_to_textfile

REGISTRY = CollectorRegistry()

records_total = Counter(
    "ad_records_total",
    "Log records analyzed",
    registry=REGISTRY,
)
findings_total = Counter(
    "ad_findings_total",
    "Findings emitted, by finding kind",
    ["kind"],
    registry=REGISTRY,
)
suspicious_events = Gauge(
    "ad_suspicious_events",
    "total_suspicious_events of the most recent run",
    registry=REGISTRY,
)
# Runs range from a handful of records to a few million.
detect_duration = Histogram(
    "ad_detect_duration_seconds",
    "Wall time of one detect() call",
    buckets=[0.01, 0.05, 0.1, 0.5, 1, 5, 10, 30, 60],
    registry=REGISTRY,
)


def record_run(report, record_count: int, duration: float) -> None:
    """Update every metric from one finished run."""
    records_total.inc(record_count)
    for finding in report.findings():
        findings_total.labels(kind=finding.kind).inc()
    suspicious_events.set(report.total_suspicious_events)
    detect_duration.observe(duration)


def write_metrics(path) -> None:
    write_to_textfile(str(path), REGISTRY)
