# ukpolice/client.py
"""
Client for the data.police.uk API.

Every call goes through the same pipeline:

    build query -> new_request -> rate limiter admission -> send once
        -> 2xx: decode into the requested shape (or copy raw bytes)
        -> otherwise: raise ApiError carrying status, message and Rate

The client never retries. Transport failures are the unchanged
``requests`` exceptions; retry/backoff is left to the caller.
"""
from __future__ import annotations

import functools
import io
import logging
import threading
import time
from typing import Any, Optional, Tuple
from urllib.parse import urljoin, urlsplit

import requests
from pydantic import TypeAdapter, ValidationError

from .config import settings
from .errors import ApiError, Cancelled, DecodeError, Rate, RequestBuildError
from .http_client import send_cancellable, send_once
from .metrics import ADMISSION_WAIT_SECONDS, RATE_REMAINING
from .options import Option, RequestSpec
from .rate_limit import RATE_LIMITER, RateLimiter
from .resources import (
    AvailabilityService, CrimeService, ForceService, NeighbourhoodService,
    StopAndSearchService, get_endpoint,
)

log = logging.getLogger(__name__)


@functools.lru_cache(maxsize=None)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def _is_sink(into: Any) -> bool:
    return not isinstance(into, type) and callable(getattr(into, "write", None))


def _validate_base_url(base_url: str) -> str:
    try:
        parts = urlsplit(base_url)
    except ValueError as e:
        raise RequestBuildError(f"invalid base URL {base_url!r}: {e}") from e
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise RequestBuildError(f"base URL must be an absolute http(s) URL, got {base_url!r}")
    if parts.query or parts.fragment:
        raise RequestBuildError(f"base URL must not carry a query or fragment: {base_url!r}")
    # relative paths resolve beneath the base only when it ends in '/'
    return base_url if base_url.endswith("/") else base_url + "/"


class Client:
    def __init__(
        self,
        session: Optional[requests.Session] = None,
        *,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        rate_limiter: Optional[RateLimiter] = None,
        timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.session = session or requests.Session()
        self.base_url = base_url or settings.base_url
        self.user_agent = settings.user_agent if user_agent is None else user_agent
        self.rate_limiter = rate_limiter or RATE_LIMITER
        self.timeout = settings.timeout if timeout is None else timeout
        self.logger = logger or log

        self._rate_lock = threading.Lock()
        self._rate = Rate()

        self.availability = AvailabilityService(self)
        self.crime = CrimeService(self)
        self.force = ForceService(self)
        self.neighbourhood = NeighbourhoodService(self)
        self.stop_and_search = StopAndSearchService(self)

    # ----------------
    # Configuration
    # ----------------
    @property
    def base_url(self) -> str:
        return self._base_url

    @base_url.setter
    def base_url(self, value: str) -> None:
        self._base_url = _validate_base_url(value)

    @property
    def rate(self) -> Rate:
        """Rate snapshot from the most recent error response (zero value until one is seen)."""
        with self._rate_lock:
            return self._rate

    def _set_rate(self, rate: Rate) -> None:
        with self._rate_lock:
            self._rate = rate
        RATE_REMAINING.set(rate.remaining)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    # ----------------
    # Request building
    # ----------------
    def new_request(self, method: str, path: str) -> requests.PreparedRequest:
        """Resolve path against base_url and attach the standard headers."""
        try:
            parts = urlsplit(path)
        except ValueError as e:
            raise RequestBuildError(f"malformed path {path!r}: {e}") from e
        if parts.scheme or parts.netloc:
            raise RequestBuildError(f"path must be relative to the base URL, got {path!r}")

        url = urljoin(self.base_url, path)
        if not url.startswith(self.base_url):
            raise RequestBuildError(f"path {path!r} resolves outside the base URL ({url})")

        headers = {"Accept": "application/json"}
        if self.user_agent:
            headers["User-Agent"] = self.user_agent

        try:
            return self.session.prepare_request(requests.Request(method.upper(), url, headers=headers))
        except (requests.exceptions.InvalidURL, requests.exceptions.MissingSchema) as e:
            raise RequestBuildError(f"cannot build request for {path!r}: {e}") from e

    # ----------------
    # Pipeline
    # ----------------
    def execute(
        self,
        request: requests.PreparedRequest,
        into: Any = None,
        *,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
        endpoint: Optional[str] = None,
    ) -> Tuple[Any, requests.Response]:
        """
        Send request once and return (value, response).

        into:
          None           -> body is not decoded, value is None
          writable sink  -> body bytes (or text for text streams) are written to it, value is the sink
          anything else  -> a type pydantic can validate JSON into (List[Crime], a model, dict, ...)

        An empty 2xx body yields value None. Non-2xx raises ApiError with the
        response attached; the client's last-observed rate is updated first.
        cancel/timeout bound the admission wait; the remaining timeout is
        passed on to the transport. Setting cancel while the send is in
        flight abandons it with Cancelled.
        """
        endpoint = endpoint or "custom"
        started = time.monotonic()

        waited = self.rate_limiter.acquire(cancel=cancel, timeout=timeout)
        ADMISSION_WAIT_SECONDS.observe(waited)

        if cancel is not None and cancel.is_set():
            raise Cancelled("request cancelled before it was sent")
        send_timeout = self.timeout
        if timeout is not None:
            left = timeout - (time.monotonic() - started)
            if left <= 0:
                raise Cancelled("timed out before the request was sent")
            send_timeout = left if send_timeout is None else min(send_timeout, left)

        self.logger.debug("%s %s", request.method, request.url, extra={"endpoint": endpoint})
        if cancel is None:
            resp = send_once(self.session, request, timeout=send_timeout, endpoint=endpoint)
        else:
            resp = send_cancellable(self.session, request, cancel, timeout=send_timeout, endpoint=endpoint)

        warning = resp.headers.get("Warning")
        if warning:
            self.logger.warning(
                "warning header received (%s %s): %s",
                request.method, urlsplit(request.url).path, warning,
                extra={"endpoint": endpoint},
            )

        if not 200 <= resp.status_code <= 299:
            err = ApiError.from_response(resp)
            self._set_rate(err.rate)
            self.logger.info(
                "%s %s failed: HTTP %s %s", request.method, request.url, err.status_code, err,
                extra={"endpoint": endpoint, "status": err.status_code, "rate_remaining": err.rate.remaining},
            )
            raise err

        return self._decode(resp, into, endpoint), resp

    def _decode(self, resp: requests.Response, into: Any, endpoint: str) -> Any:
        if into is None:
            return None
        if _is_sink(into):
            if isinstance(into, io.TextIOBase):
                into.write(resp.text)
            else:
                into.write(resp.content)
            return into

        body = resp.content or b""
        if not body.strip():
            return None
        try:
            return _adapter(into).validate_json(body)
        except ValidationError as e:
            raise DecodeError(f"could not decode {endpoint} response: {e}") from e

    # ----------------
    # Resource dispatch
    # ----------------
    def fetch(
        self,
        resource: str,
        *options: Option,
        cancel: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
        **path_params: str,
    ) -> Tuple[Any, requests.Response]:
        """Look resource up in the endpoint table, build the call and execute it."""
        ep = get_endpoint(resource)
        spec = RequestSpec.build(ep.format_path(**path_params), *options)
        req = self.new_request("GET", spec.url)
        return self.execute(req, ep.result, cancel=cancel, timeout=timeout, endpoint=ep.name)

    def get(self, resource: str, *options: Option, **kw) -> Any:
        """Like fetch() but returns only the records ([] for an empty list resource)."""
        value, _ = self.fetch(resource, *options, **kw)
        if value is None and get_endpoint(resource).many:
            return []
        return value
