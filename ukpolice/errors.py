# ukpolice/errors.py
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import requests

# Upstream rate accounting headers; absent on most responses.
HEADER_RATE_REMAINING = "X-ESI-Error-Limit-Remain"
HEADER_RATE_RESET = "X-ESI-Error-Limit-Reset"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class UKPoliceError(Exception):
    """Base class for everything this package raises itself."""


class RequestBuildError(UKPoliceError, ValueError):
    """Bad base URL or a relative path that cannot be resolved against it."""


class OptionConflictError(UKPoliceError, ValueError):
    """More than one location selector was supplied for a single request."""


class Cancelled(UKPoliceError):
    """Admission was cancelled (or timed out) before the request was sent."""


class DecodeError(UKPoliceError, ValueError):
    """A 2xx response body could not be decoded into the requested shape."""


@dataclass(frozen=True)
class Rate:
    """Error rate-limit snapshot taken from response headers."""

    remaining: int = 0
    reset: Optional[datetime] = None

    def __str__(self) -> str:
        secs = (self.reset - _now()).total_seconds() if self.reset else 0.0
        return f"error rate limit: {self.remaining} remaining calls; reset in {secs:.0f}s"


def parse_rate(resp: requests.Response) -> Rate:
    remaining = 0
    reset = None

    raw = resp.headers.get(HEADER_RATE_REMAINING, "")
    if raw:
        try:
            remaining = int(raw)
        except ValueError:
            remaining = 0

    raw = resp.headers.get(HEADER_RATE_RESET, "")
    if raw:
        try:
            delta = int(raw)
        except ValueError:
            delta = 0
        if delta:
            reset = _now() + timedelta(seconds=delta)

    return Rate(remaining=remaining, reset=reset)


class ApiError(UKPoliceError):
    """Non-2xx response from data.police.uk.

    Carries the HTTP status, the upstream ``error`` message when the body
    had one, the rate snapshot at the time of the error and the response
    itself so callers can still look at headers.
    """

    def __init__(
        self,
        status_code: int,
        message: str = "",
        rate: Rate | None = None,
        response: requests.Response | None = None,
    ):
        super().__init__(message or f"HTTP {status_code}")
        self.status_code = status_code
        self.message = message
        self.rate = rate or Rate()
        self.response = response

    def __str__(self) -> str:
        return self.message or f"HTTP {self.status_code}"

    def __repr__(self) -> str:
        return f"ApiError(status_code={self.status_code}, message={self.message!r}, rate={self.rate!r})"

    @classmethod
    def from_response(cls, resp: requests.Response) -> "ApiError":
        message = ""
        body = resp.content or b""
        if body.strip():
            try:
                payload = json.loads(body)
            except ValueError:
                payload = None
            if isinstance(payload, dict) and isinstance(payload.get("error"), str):
                message = payload["error"]
        return cls(resp.status_code, message, parse_rate(resp), resp)
