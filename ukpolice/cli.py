# ukpolice/cli.py
"""
Demo: fetch stop-and-search records for several forces over several months,
fanning out over a thread pool that shares one Client (and so one rate
limiter). Retries are done here, by the caller, with tenacity.

    python -m ukpolice --forces metropolitan,leicestershire --months 3
"""
from __future__ import annotations

import argparse
import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence, Tuple

import requests
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from .client import Client
from .config import settings
from .errors import ApiError, UKPoliceError
from .logging_setup import setup_logging
from .metrics import JOBS_TOTAL, start_metrics_server
from .options import with_date, with_force
from .utils import months_back, to_ym

log = logging.getLogger(__name__)


def is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, ApiError):
        return exc.status_code == 429 or exc.status_code >= 500
    return isinstance(exc, (requests.ConnectionError, requests.Timeout))


def build_retrying(max_attempts: int, backoff_base: float, backoff_cap: float) -> Retrying:
    return Retrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=backoff_base, max=backoff_cap),
        retry=retry_if_exception(is_retryable),
        reraise=True,
    )


def fetch_stops(client: Client, force: str, ym: str, retrying: Retrying) -> int:
    # Retrying keeps per-call state; each job gets its own copy
    searches = retrying.copy()(client.stop_and_search.by_force, with_force(force), with_date(ym))
    return len(searches)


def plan_jobs(client: Client, forces: Sequence[str], month: Optional[str], count: int) -> List[Tuple[str, str]]:
    """(force, month) pairs to fetch, skipping forces with no published data for a month."""
    available = client.availability.availability()
    by_month = {a.date: set(a.stop_and_search) for a in available if a.date}
    if month is None:
        if not by_month:
            return []
        month = max(by_month)

    jobs = []
    for ym in months_back(month, count):
        published = by_month.get(ym, set())
        for force in forces:
            if force in published:
                jobs.append((force, ym))
            else:
                log.info("[cli] no stop-and-search data for %s %s, skipping", force, ym)
    return jobs


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="ukpolice", description="Fetch stop-and-search counts from data.police.uk")
    p.add_argument("--forces", default=settings.forces_csv, help="comma separated force ids")
    p.add_argument("--month", type=to_ym, default=settings.start_month,
                   help="newest month to fetch (YYYY-MM); defaults to the latest available")
    p.add_argument("--months", type=int, default=1, help="number of months to fetch, counting back")
    p.add_argument("--workers", type=int, default=settings.max_workers)
    p.add_argument("--retries", type=int, default=settings.api_max_retries, help="attempts per job")
    p.add_argument("--metrics-port", type=int, default=settings.metrics_port)
    return p.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None, client: Optional[Client] = None) -> int:
    args = parse_args(argv)
    setup_logging(app="ukpolice", level=settings.log_level, filename=settings.log_file)

    if args.metrics_port:
        start_metrics_server(args.metrics_port)
        log.info("[cli] Prometheus metrics on :%s", args.metrics_port)

    forces = [f.strip() for f in args.forces.split(",") if f.strip()]
    client = client or Client()
    retrying = build_retrying(args.retries, settings.api_backoff_base, settings.api_backoff_cap)

    start = time.monotonic()
    jobs = plan_jobs(client, forces, args.month, args.months)
    log.info("[cli] %d jobs across %d forces", len(jobs), len(forces))

    failures = 0
    with ThreadPoolExecutor(max_workers=max(1, args.workers)) as pool:
        futures = {pool.submit(fetch_stops, client, f, ym, retrying): (f, ym) for f, ym in jobs}
        for fut in as_completed(futures):
            force, ym = futures[fut]
            try:
                rows = fut.result()
            except (UKPoliceError, requests.RequestException) as e:
                failures += 1
                JOBS_TOTAL.labels(status="error").inc()
                log.error("[cli] %s %s failed: %s", force, ym, e, extra={"force": force, "month": ym})
                continue
            JOBS_TOTAL.labels(status="ok").inc()
            log.info("[cli] %s %s: %d searches", force, ym, rows, extra={"force": force, "month": ym})

    log.info("[cli] done in %.2fs, %d failed; %s", time.monotonic() - start, failures, client.rate)
    return 1 if failures else 0
