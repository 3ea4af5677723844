"""OAuth 2.0 authorization-code flow with PKCE over a loopback redirect."""

from __future__ import annotations

import base64
import hashlib
import json
import logging
import secrets
import socket
import sys
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, unquote, urlsplit, urlunsplit

from .http_client import HttpClient

log = logging.getLogger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
CALLBACK_RESPONSE = (
    b"HTTP/1.1 200 OK\r\nContent-Type: text/html\r\nConnection: close\r\n\r\n"
    b"<html><body><h2>Authorization complete. You may close this tab.</h2></body></html>"
)
_MAX_REQUEST_BYTES = 65536


class OAuthError(Exception):
    """Raised when authorization or a token request fails."""


@dataclass(frozen=True)
class OAuthConfig:
    auth_url: str
    token_url: str
    client_id: str
    client_secret: str = ""
    scopes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "scopes", tuple(self.scopes))


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str = ""


@dataclass(frozen=True)
class CallbackResult:
    code: str = ""
    state: str = ""
    error: str = ""


def random_base64url(byte_count: int) -> str:
    """Return ``byte_count`` random bytes as unpadded base64url text."""
    raw = secrets.token_bytes(byte_count)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def sha256_base64url(text: str) -> str:
    """Return the SHA-256 of ``text`` as unpadded base64url (the S256 challenge)."""
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def _encode_pairs(pairs: Iterable[tuple[str, str]]) -> str:
    return "&".join(f"{quote(key, safe='')}={quote(value, safe='')}" for key, value in pairs)


def _announce_url(url: str) -> None:
    print(f"Open this URL in a browser to authorize:\n{url}", file=sys.stderr, flush=True)


def build_authorization_url(
    config: OAuthConfig, redirect_uri: str, state: str, code_challenge: str
) -> str:
    """Return the authorization endpoint URL with the PKCE query attached."""
    query = _encode_pairs(
        [
            ("client_id", config.client_id),
            ("redirect_uri", redirect_uri),
            ("response_type", "code"),
            ("scope", " ".join(config.scopes)),
            ("state", state),
            ("code_challenge", code_challenge),
            ("code_challenge_method", "S256"),
        ]
    )
    parts = urlsplit(config.auth_url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


def _query_value(query: str, name: str) -> str:
    for item in query.split("&"):
        key, _, value = item.partition("=")
        if unquote(key) == name:
            return unquote(value)
    return ""


def parse_callback_request(request: bytes | str) -> CallbackResult:
    """Extract ``code``, ``state`` and ``error`` from a raw redirect request."""
    if isinstance(request, bytes):
        request = request.decode("utf-8", errors="replace")
    carriage = request.find("\r")
    first_line = request if carriage < 0 else request[:carriage]
    start = first_line.find(" ") + 1
    end = first_line.rfind(" ")
    path = first_line[start:end] if end >= start else first_line[start:]
    query = urlsplit("http://localhost" + path).query
    return CallbackResult(
        code=_query_value(query, "code"),
        state=_query_value(query, "state"),
        error=_query_value(query, "error"),
    )


def _string(mapping: dict[str, Any], key: str) -> str:
    value = mapping.get(key)
    return value if isinstance(value, str) else ""


def parse_token_response(data: bytes | str) -> TokenPair:
    """Return the tokens in a token endpoint reply, or raise OAuthError with its message."""
    try:
        obj = json.loads(data)
    except ValueError:
        obj = {}
    if not isinstance(obj, dict):
        obj = {}
    if "access_token" in obj:
        return TokenPair(_string(obj, "access_token"), _string(obj, "refresh_token"))
    message = _string(obj, "message") or _string(obj, "error_description")
    if not message:
        message = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    raise OAuthError(message)


class OAuthFlow:
    """Runs one browser authorization at a time and exchanges codes for tokens.

    ``open_browser`` receives the authorization URL; by default the URL is
    printed to standard error for the user to open.
    """

    def __init__(
        self,
        http: HttpClient | None = None,
        open_browser: Callable[[str], Any] | None = None,
    ) -> None:
        self._http = http if http is not None else HttpClient()
        self._open_browser = open_browser if open_browser is not None else _announce_url
        self._lock = threading.Lock()
        self._server: socket.socket | None = None
        self._thread: threading.Thread | None = None
        self._config: OAuthConfig | None = None
        self._future: Future[TokenPair] | None = None
        self._pending = False
        self._state = ""
        self._code_verifier = ""
        self.redirect_uri = ""

    def __enter__(self) -> OAuthFlow:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.abort()

    def start(self, config: OAuthConfig) -> str:
        """Listen on a loopback port, hand the URL to the browser opener and return it."""
        self.abort()
        server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            server.bind(("127.0.0.1", 0))
            server.listen(1)
            server.settimeout(0.2)
        except OSError as exc:
            server.close()
            raise OAuthError(f"Failed to start loopback server: {exc}") from exc

        port = server.getsockname()[1]
        redirect_uri = f"http://127.0.0.1:{port}/callback"
        code_verifier = random_base64url(32)
        state = random_base64url(16)
        url = build_authorization_url(config, redirect_uri, state, sha256_base64url(code_verifier))

        with self._lock:
            self._server = server
            self._config = config
            self._future = Future()
            self._pending = True
            self._state = state
            self._code_verifier = code_verifier
            self.redirect_uri = redirect_uri

        self._thread = threading.Thread(
            target=self._serve, args=(server,), name="oauth-loopback", daemon=True
        )
        self._thread.start()
        log.info("opening browser for OAuth: %s", url)
        self._open_browser(url)
        return url

    def wait(self, timeout: float | None = None) -> TokenPair:
        """Block until the flow finishes and return its tokens."""
        with self._lock:
            future = self._future
        if future is None:
            raise OAuthError("No authorization in progress")
        try:
            return future.result(timeout)
        except FutureTimeoutError as exc:
            self.abort()
            raise OAuthError("Timed out waiting for authorization") from exc

    def handle_callback(self, request: bytes | str) -> TokenPair:
        """Finish the pending flow from the raw redirect request."""
        with self._lock:
            pending = self._pending
            future = self._future
            config = self._config
            state = self._state
            code_verifier = self._code_verifier
            redirect_uri = self.redirect_uri
            self._pending = False
        self._close_server()
        if not pending or future is None or config is None:
            raise OAuthError("No authorization in progress")

        try:
            tokens = self._complete(
                parse_callback_request(request), config, state, code_verifier, redirect_uri
            )
        except OAuthError as exc:
            future.set_exception(exc)
            raise
        future.set_result(tokens)
        return tokens

    def abort(self) -> None:
        """Stop listening and fail any pending wait."""
        with self._lock:
            pending = self._pending
            future = self._future
            self._pending = False
        self._close_server()
        if pending and future is not None and not future.done():
            future.set_exception(OAuthError("Authorization aborted"))
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)

    def refresh(self, config: OAuthConfig, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for new tokens."""
        return self._request_tokens(
            config,
            [
                ("client_id", config.client_id),
                ("grant_type", "refresh_token"),
                ("refresh_token", refresh_token),
            ],
        )

    def _complete(
        self,
        callback: CallbackResult,
        config: OAuthConfig,
        state: str,
        code_verifier: str,
        redirect_uri: str,
    ) -> TokenPair:
        if callback.error:
            raise OAuthError(f"Authorization denied: {callback.error}")
        if callback.state != state:
            raise OAuthError("State mismatch — possible CSRF")
        if not callback.code:
            raise OAuthError("No code in callback")
        return self._request_tokens(
            config,
            [
                ("client_id", config.client_id),
                ("code", callback.code),
                ("code_verifier", code_verifier),
                ("grant_type", "authorization_code"),
                ("redirect_uri", redirect_uri),
            ],
        )

    def _request_tokens(self, config: OAuthConfig, fields: list[tuple[str, str]]) -> TokenPair:
        if config.client_secret:
            fields = [*fields, ("client_secret", config.client_secret)]
        body = _encode_pairs(fields).encode("utf-8")
        response = self._http.post(config.token_url, {}, body, FORM_CONTENT_TYPE)
        if not response.body and response.error:
            raise OAuthError(response.error)
        return parse_token_response(response.body)

    def _close_server(self) -> None:
        with self._lock:
            server, self._server = self._server, None
        if server is not None:
            server.close()

    def _serve(self, server: socket.socket) -> None:
        while True:
            try:
                conn, _ = server.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            with conn:
                conn.settimeout(5.0)
                data = self._read_request(conn)
                if not data:
                    continue
                try:
                    conn.sendall(CALLBACK_RESPONSE)
                except OSError:
                    pass
            try:
                self.handle_callback(data)
            except OAuthError as exc:
                log.info("authorization failed: %s", exc)
            except Exception:
                log.exception("unexpected failure while finishing authorization")
            return

    @staticmethod
    def _read_request(conn: socket.socket) -> bytes:
        data = b""
        while b"\r\n\r\n" not in data and len(data) < _MAX_REQUEST_BYTES:
            try:
                chunk = conn.recv(4096)
            except OSError:
                break
            if not chunk:
                break
            data += chunk
        return data