# tests/test_http_client.py
import threading

import pytest
import requests

from ukpolice.errors import Cancelled
from ukpolice.http_client import send_cancellable

from conftest import BASE_URL, make_response


class SlowSession(requests.Session):
    """Session whose send blocks until released, remembering what it returned."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()
        self.returned = threading.Event()
        self.closed = threading.Event()

    def send(self, request, **kwargs):
        self.release.wait(5)
        resp = make_response(request, 200, "[]")
        resp.close = self.closed.set
        self.returned.set()
        return resp


def _prepared():
    return requests.Request("GET", BASE_URL + "forces").prepare()


def test_abandoned_response_is_closed_when_it_arrives():
    session = SlowSession()
    cancel = threading.Event()
    threading.Timer(0.05, cancel.set).start()

    with pytest.raises(Cancelled):
        send_cancellable(session, _prepared(), cancel)
    assert not session.returned.is_set()

    session.release.set()
    assert session.closed.wait(2)


def test_completed_send_is_returned_untouched():
    session = SlowSession()
    session.release.set()
    resp = send_cancellable(session, _prepared(), threading.Event())
    assert resp.status_code == 200
    assert not session.closed.is_set()


def test_cancel_after_completion_keeps_the_response():
    session = SlowSession()
    session.release.set()
    cancel = threading.Event()
    resp = send_cancellable(session, _prepared(), cancel)
    cancel.set()
    assert resp.json() == []
