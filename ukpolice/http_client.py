from __future__ import annotations
import threading
import time

import requests

from .errors import Cancelled
from .metrics import API_LATENCY_SECONDS, API_CALLS_TOTAL


def send_once(
    session: requests.Session,
    request: requests.PreparedRequest,
    *,
    timeout: float | None = None,
    endpoint: str = "custom",
) -> requests.Response:
    """
    Send a prepared request exactly once. No retries: transport errors
    propagate unchanged to the caller.
    Emits Prometheus metrics for latency and call outcomes.
    """
    start = time.time()
    try:
        env = session.merge_environment_settings(request.url, {}, None, None, None)
        resp = session.send(request, timeout=timeout, **env)
    except requests.RequestException:
        API_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - start)
        API_CALLS_TOTAL.labels(endpoint=endpoint, outcome="exception").inc()
        raise
    API_LATENCY_SECONDS.labels(endpoint=endpoint).observe(time.time() - start)
    API_CALLS_TOTAL.labels(endpoint=endpoint, outcome=str(resp.status_code)).inc()
    return resp


def send_cancellable(
    session: requests.Session,
    request: requests.PreparedRequest,
    cancel: threading.Event,
    *,
    timeout: float | None = None,
    endpoint: str = "custom",
    poll: float = 0.05,
) -> requests.Response:
    """
    send_once() on a helper thread so the caller can walk away mid-flight.

    Raises Cancelled as soon as `cancel` is set while the send (headers and
    body) is still running. The abandoned send finishes in the background
    and its response, if any, is closed.
    """
    lock = threading.Lock()
    done = threading.Event()
    state: dict = {"abandoned": False}

    def run() -> None:
        try:
            state["resp"] = send_once(session, request, timeout=timeout, endpoint=endpoint)
        except Exception as e:
            state["exc"] = e
        finally:
            with lock:
                done.set()
                abandoned = state["abandoned"]
        if abandoned and "resp" in state:
            state["resp"].close()

    threading.Thread(target=run, name="ukpolice-send", daemon=True).start()

    while not done.wait(poll):
        if cancel.is_set():
            with lock:
                if not done.is_set():
                    state["abandoned"] = True
                    raise Cancelled("request cancelled while in flight")

    if "exc" in state:
        raise state["exc"]
    return state["resp"]
