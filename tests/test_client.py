"""
Tests for eventhub_api.client: request building and error mapping.
"""

import requests

from eventhub_api.client import EventHubClient


class FakeResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.content = b"" if payload is None else b"{}"
        self.text = ""

    def json(self):
        if self._payload is None:
            raise ValueError("no body")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, **kwargs):
        self.calls.append(kwargs)
        return self.responses.pop(0)


class TestEventHubClient:
    def test_login_stores_token_for_later_calls(self):
        session = FakeSession(FakeResponse(200, {"token": "abc"}), FakeResponse(200, []))
        client = EventHubClient(base_url="http://api.local/", session=session)

        data, error = client.login("a@example.com", "pw")
        events, _ = client.list_events()

        assert data == {"token": "abc"} and error is None
        assert events == []
        assert session.calls[0]["url"] == "http://api.local/api/users/login"
        assert session.calls[1]["headers"] == {"Authorization": "Bearer abc"}
        assert session.calls[1]["url"] == "http://api.local/api/events/"

    def test_http_error_uses_detail(self):
        session = FakeSession(FakeResponse(400, {"detail": "Event is sold out"}))
        client = EventHubClient(base_url="http://api.local", token="t", session=session)

        data, error = client.register_for_event(7)

        assert data is None
        assert error == {"status_code": 400, "message": "Event is sold out"}
        assert session.calls[0]["method"] == "POST"
        assert session.calls[0]["url"] == "http://api.local/api/events/register/7"

    def test_connection_error(self):
        class BrokenSession:
            def request(self, **kwargs):
                raise requests.ConnectionError("refused")

        client = EventHubClient(base_url="http://api.local", session=BrokenSession())
        data, error = client.cancel_event(1)
        assert data is None
        assert error["status_code"] is None
        assert "refused" in error["message"]
