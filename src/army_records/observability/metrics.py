"""
Prometheus metrics collection for army-records

This module provides metrics instrumentation for monitoring
file processing outcomes, schema violations and store writes.
"""
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
    write_to_textfile,
)

# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# PIPELINE METRICS
# =======================

# Files processed counter
files_processed_total = Counter(
    name="army_records_files_processed_total",
    documentation="Total number of files run through the conversion pipeline",
    labelnames=["kind", "outcome"],  # kind: xml, spreadsheet; outcome: validated, corrected, rejected
    registry=REGISTRY,
)

# Processing duration histogram
processing_duration_seconds = Histogram(
    name="army_records_processing_duration_seconds",
    documentation="Time spent processing one submitted file in seconds",
    labelnames=["kind"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
    registry=REGISTRY,
)

# Batch size histogram
batch_size = Histogram(
    name="army_records_batch_size",
    documentation="Number of soldier candidates per submitted file",
    buckets=[1, 5, 10, 50, 100, 500, 1000, 5000],
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

# Schema violations counter
schema_violations_total = Counter(
    name="army_records_schema_violations_total",
    documentation="Total number of schema violations found",
    labelnames=["rule"],
    registry=REGISTRY,
)

# =======================
# STORE METRICS
# =======================

records_stored_total = Counter(
    name="army_records_records_stored_total",
    documentation="Total number of soldier records upserted into the store",
    registry=REGISTRY,
)

store_write_failures_total = Counter(
    name="army_records_store_write_failures_total",
    documentation="Total number of soldier records the store refused",
    registry=REGISTRY,
)


# =======================
# EXPOSITION
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus exposition format
    """
    return generate_latest(REGISTRY)


def write_metrics(path: str) -> None:
    """
    Write the registry to a node_exporter textfile-collector file.

    The file is written to a temporary name and renamed into place.
    """
    write_to_textfile(path, REGISTRY)


# =======================
# CONTEXT MANAGERS
# =======================

class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(processing_duration_seconds, kind="xml"):
            # do work
            pass
    """

    def __init__(self, histogram: Histogram, **labels):
        """
        Initialize duration tracker

        Args:
            histogram: Prometheus Histogram metric
            **labels: Label values for the metric
        """
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        """Start timer"""
        self.timer = self.histogram.labels(**self.labels).time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Stop timer"""
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    if labels:
        counter.labels(**labels).inc(value)
    else:
        counter.inc(value)


# =======================
# PIPELINE HELPERS
# =======================

def record_file_processed(
    kind: str,
    outcome: str,
    candidate_count: int,
    violation_rules: list[str],
) -> None:
    """
    Record the metrics of one finished pipeline run.

    Args:
        kind: Input kind ("xml" or "spreadsheet")
        outcome: Ledger outcome tag
        candidate_count: Number of candidates extracted
        violation_rules: Rule name of every violation found
    """
    increment_counter(files_processed_total, kind=kind, outcome=outcome)
    batch_size.observe(candidate_count)
    for rule in violation_rules:
        increment_counter(schema_violations_total, rule=rule)


def record_store_writes(stored: int, failed: int) -> None:
    """
    Record per-record store write results for one batch.

    Args:
        stored: Records upserted
        failed: Records the store refused
    """
    if stored:
        increment_counter(records_stored_total, stored)
    if failed:
        increment_counter(store_write_failures_total, failed)
