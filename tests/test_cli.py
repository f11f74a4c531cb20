# tests/test_cli.py
from urllib.parse import parse_qs, urlsplit

import pytest
import requests

from ukpolice import cli
from ukpolice.errors import ApiError, DecodeError

AVAILABILITY = """
[
    {"date": "2017-02", "stop-and-search": ["leicestershire", "metropolitan"]},
    {"date": "2017-01", "stop-and-search": ["leicestershire"]}
]
"""


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    # keep the root logger free of stdout handlers between tests
    monkeypatch.setattr(cli, "setup_logging", lambda **kw: None)


def _force_of(req):
    return parse_qs(urlsplit(req.url).query)["force"][0]


@pytest.mark.parametrize("exc, expected", [
    (ApiError(429), True),
    (ApiError(500), True),
    (ApiError(503), True),
    (ApiError(400), False),
    (ApiError(404), False),
    (requests.ConnectionError("refused"), True),
    (requests.Timeout("slow"), True),
    (DecodeError("bad json"), False),
    (ValueError("nope"), False),
])
def test_is_retryable(exc, expected):
    assert cli.is_retryable(exc) is expected


def test_retrying_gives_up_on_client_errors():
    calls = []

    def fail():
        calls.append(1)
        raise ApiError(404, "not found")

    with pytest.raises(ApiError):
        cli.build_retrying(5, 0, 0)(fail)
    assert len(calls) == 1


def test_retrying_retries_server_errors_then_succeeds():
    calls = []

    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise ApiError(503)
        return "ok"

    assert cli.build_retrying(5, 0, 0)(flaky) == "ok"
    assert len(calls) == 3


def test_plan_jobs_skips_unpublished_forces(client, router):
    router.route("/crimes-street-dates", AVAILABILITY)
    jobs = cli.plan_jobs(client, ["leicestershire", "metropolitan"], None, 2)
    assert jobs == [
        ("leicestershire", "2017-02"),
        ("metropolitan", "2017-02"),
        ("leicestershire", "2017-01"),
    ]


def test_plan_jobs_with_nothing_published(client, router):
    router.route("/crimes-street-dates", "[]")
    assert cli.plan_jobs(client, ["metropolitan"], None, 3) == []


def test_main_success(client, router):
    router.route("/crimes-street-dates", AVAILABILITY)
    router.route("/stops-force", lambda req: (200, '[{"type": "Person search"}]', None))
    rc = cli.main(["--forces", "leicestershire,metropolitan", "--month", "2017-02",
                   "--months", "2", "--workers", "2", "--retries", "1"], client=client)
    assert rc == 0
    stops = [r for r in router.requests if "/stops-force" in r.url]
    assert sorted(_force_of(r) for r in stops) == ["leicestershire", "leicestershire", "metropolitan"]


def test_main_reports_failed_jobs(client, router):
    router.route("/crimes-street-dates", AVAILABILITY)

    def stops(req):
        if _force_of(req) == "metropolitan":
            return 500, '{"error": "internal"}', None
        return 200, "[]", None

    router.route("/stops-force", stops)
    rc = cli.main(["--forces", "leicestershire,metropolitan", "--month", "2017-02",
                   "--retries", "1"], client=client)
    assert rc == 1


def test_month_argument_is_validated():
    with pytest.raises(SystemExit):
        cli.parse_args(["--month", "2017/02"])
