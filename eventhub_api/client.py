"""EventHub API client.

A thin wrapper around the EventHub REST API built on ``requests``.  It
is meant for bots, scripts and integration checks that talk to a
running server.

Every public method returns a ``(data, error)`` tuple: ``data`` holds
the parsed JSON response on success and ``error`` is ``None``; on
failure ``data`` is ``None`` and ``error`` is a dictionary with the keys
``status_code`` and ``message``.  Calling :meth:`EventHubClient.login`
stores the returned token and sends it as a bearer token on every
subsequent request.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class EventHubClient:
    """Client for the ``/api/users`` and ``/api/events`` endpoints."""

    def __init__(
        self,
        *,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Base URL of the server, e.g. ``http://localhost:8000``.
            token: Optional bearer token obtained earlier.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Per-request timeout in seconds.
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(self, method: str, path: str, *, json_body: Any | None = None) -> Result:
        url = f"{self.base_url}/api{path}"
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("detail") or err_json.get("message") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("API request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------
    def register_user(self, username: str, email: str, password: str) -> Result:
        return self._request(
            "POST", "/users/register", json_body={"username": username, "email": email, "password": password}
        )

    def login(self, email: str, password: str) -> Result:
        """Log in and remember the token for later calls."""
        data, error = self._request("POST", "/users/login", json_body={"email": email, "password": password})
        if data and data.get("token"):
            self.token = data["token"]
        return data, error

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------
    def create_event(
        self,
        *,
        name: str,
        description: str,
        date: str,
        capacity: int,
        price: float,
    ) -> Result:
        body = {"name": name, "description": description, "date": date, "capacity": capacity, "price": price}
        return self._request("POST", "/events/create", json_body=body)

    def list_events(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", "/events/")
        return data or [], error

    def register_for_event(self, event_id: int) -> Result:
        return self._request("POST", f"/events/register/{event_id}")

    def cancel_event(self, event_id: int) -> Result:
        return self._request("DELETE", f"/events/cancel/{event_id}")

    def created_events(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", "/events/created")
        return data or [], error

    def registered_events(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", "/events/registered")
        return data or [], error

    def capacity(self, event_id: int) -> Result:
        return self._request("GET", f"/events/capacity/{event_id}")

    def top_events(self) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        data, error = self._request("GET", "/events/top5")
        return data or [], error
