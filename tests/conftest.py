# tests/conftest.py
import threading
import time
from urllib.parse import parse_qs, urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from ukpolice.client import Client
from ukpolice.rate_limit import RateLimiter

# Non-empty base path so tests catch endpoints written as absolute paths.
HOST = "http://police.test"
BASE_PATH = "/api"
BASE_URL = HOST + BASE_PATH + "/"


def make_response(request, status=200, body="", headers=None):
    resp = requests.Response()
    resp.status_code = status
    resp._content = body.encode("utf-8") if isinstance(body, str) else body
    resp._content_consumed = True
    resp.headers = CaseInsensitiveDict(headers or {})
    resp.encoding = "utf-8"
    resp.url = request.url
    resp.request = request
    resp.reason = "OK" if status < 400 else "Error"
    return resp


class Router(BaseAdapter):
    """Serves canned responses by path, relative to BASE_PATH."""

    def __init__(self):
        super().__init__()
        self.routes = {}
        self.requests = []
        self.sent_at = []
        self._lock = threading.Lock()

    def route(self, path, body="", status=200, headers=None):
        if callable(body):
            self.routes[path] = body
        else:
            self.routes[path] = lambda req: (status, body, headers)

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        with self._lock:
            self.requests.append(request)
            self.sent_at.append(time.monotonic())
        path = urlsplit(request.url).path
        if not path.startswith(BASE_PATH + "/"):
            return make_response(request, 500, "Client.base_url path prefix is not preserved in the request URL.")
        handler = self.routes.get(path[len(BASE_PATH):])
        if handler is None:
            return make_response(request, 404, '{"error":"not found"}')
        status, body, headers = handler(request)
        return make_response(request, status, body, headers)

    def close(self):
        pass

    def last_query(self):
        return {k: v[0] for k, v in parse_qs(urlsplit(self.requests[-1].url).query).items()}


@pytest.fixture
def router():
    return Router()


@pytest.fixture
def make_client(router):
    def _make(**kw):
        session = requests.Session()
        session.mount(HOST + "/", router)
        kw.setdefault("base_url", BASE_URL)
        kw.setdefault("rate_limiter", RateLimiter(1000, burst=1000))
        return Client(session, **kw)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()
