import pytest
import requests

from reworkit.worker.client import PushError, ResultClient


class DummyResponse:
    def __init__(self, status_code=200):
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class DummySession:
    def __init__(self, post_responses=()):
        self.headers = {}
        self.posts = []
        self._post_responses = list(post_responses)

    def post(self, url, **kwargs):
        self.posts.append((url, kwargs))
        outcome = self._post_responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def test_push_log_sends_multipart_form_with_secret():
    session = DummySession([DummyResponse(200)])
    client = ResultClient("builder.example:3000", "tok", session=session, sleep=lambda s: None)

    client.push_log("bash", "amd64", True, b"\x1f\x8bgz")

    assert session.headers["User-Agent"] == "reworkit"
    url, kwargs = session.posts[0]
    assert url == "http://builder.example:3000/push_log"
    assert kwargs["headers"] == {"SECRET": "tok"}
    assert kwargs["data"] == {"package": "bash", "arch": "amd64", "success": "true"}
    assert kwargs["files"]["log"][0] == "bash.log"
    assert kwargs["files"]["log"][1] == b"\x1f\x8bgz"


def test_push_log_retries_then_succeeds():
    session = DummySession([
        requests.ConnectionError("refused"),
        DummyResponse(500),
        DummyResponse(200),
    ])
    sleeps = []
    client = ResultClient("http://srv/", "tok", retry_delay=10, session=session, sleep=sleeps.append)

    client.push_log("bash", "amd64", False, b"")

    assert len(session.posts) == 3
    assert sleeps == [10, 10]
    assert session.posts[0][1]["data"]["success"] == "false"
    assert session.posts[0][0] == "http://srv/push_log"


def test_push_log_gives_up_after_retries():
    session = DummySession([DummyResponse(401)] * 3)
    sleeps = []
    client = ResultClient("http://srv", "bad", retries=3, session=session, sleep=sleeps.append)

    with pytest.raises(PushError):
        client.push_log("bash", "amd64", True, b"")

    assert len(session.posts) == 3
    # no sleep after the last attempt
    assert len(sleeps) == 2

