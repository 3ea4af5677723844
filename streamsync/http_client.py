"""Small blocking HTTP client that reports status, body and error text."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import requests

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True)
class HttpResponse:
    """Outcome of one HTTP exchange.

    ``status`` is 0 when no response arrived; ``error`` is empty on success.
    """

    status: int
    body: bytes
    error: str = ""

    @property
    def ok(self) -> bool:
        return not self.error

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json_object(self) -> dict[str, Any]:
        """Return the body as a JSON object, or an empty dict if it is not one."""
        try:
            value = json.loads(self.body)
        except ValueError:
            return {}
        return value if isinstance(value, dict) else {}


class HttpClient:
    """Sends requests through a ``requests`` session and never raises on failure."""

    timeout: float = 30.0

    def __init__(self, session: requests.Session | None = None) -> None:
        self._session = session if session is not None else requests.Session()

    def get(self, url: str, headers: Mapping[str, str] | None = None) -> HttpResponse:
        return self._send("GET", url, headers)

    def post(
        self,
        url: str,
        headers: Mapping[str, str] | None,
        body: bytes | str,
        content_type: str,
    ) -> HttpResponse:
        return self._send("POST", url, headers, body, content_type)

    def patch(
        self, url: str, headers: Mapping[str, str] | None, body: bytes | str
    ) -> HttpResponse:
        return self._send("PATCH", url, headers, body, JSON_CONTENT_TYPE)

    def put(
        self, url: str, headers: Mapping[str, str] | None, body: bytes | str
    ) -> HttpResponse:
        return self._send("PUT", url, headers, body, JSON_CONTENT_TYPE)

    def _send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str] | None,
        body: bytes | str | None = None,
        content_type: str | None = None,
    ) -> HttpResponse:
        merged = dict(headers or {})
        if content_type is not None:
            for key in [k for k in merged if k.lower() == "content-type"]:
                del merged[key]
            merged["Content-Type"] = content_type
        if isinstance(body, str):
            body = body.encode("utf-8")
        try:
            reply = self._session.request(
                method, url, headers=merged, data=body, timeout=self.timeout
            )
        except requests.RequestException as exc:
            return HttpResponse(0, b"", str(exc) or type(exc).__name__)
        error = ""
        if reply.status_code >= 400:
            error = f"{reply.status_code} {reply.reason or ''}".strip()
        return HttpResponse(reply.status_code, reply.content, error)