# ukpolice/metrics.py
from __future__ import annotations
from prometheus_client import (
    Counter, Histogram, Gauge,
    start_http_server
)

# Police API metrics
API_CALLS_TOTAL = Counter(
    "ukpolice_api_calls_total",
    "Calls made to the Police API",
    ["endpoint", "outcome"]  # HTTP status code or 'exception'
)

API_LATENCY_SECONDS = Histogram(
    "ukpolice_api_latency_seconds",
    "Latency of Police API calls in seconds",
    ["endpoint"]
)

ADMISSION_WAIT_SECONDS = Histogram(
    "ukpolice_admission_wait_seconds",
    "Time spent waiting on the shared rate limiter",
)

RATE_REMAINING = Gauge(
    "ukpolice_rate_remaining",
    "Remaining error-limited calls reported by the last error response",
)

# Demo CLI job metrics
JOBS_TOTAL = Counter(
    "ukpolice_jobs_total",
    "Fetch jobs run by the CLI",
    ["status"]  # ok|error
)

def start_metrics_server(port: int = 9000, addr: str = "0.0.0.0"):
    """
    Serves the metrics payload on the given port for Prometheus to scrape.
    """
    start_http_server(port, addr=addr)
