"""Twitch account connection and channel title/category updates via the Helix API."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any
from urllib.parse import quote

from .http_client import HttpClient
from .oauth_flow import OAuthConfig, OAuthError, OAuthFlow
from .token_store import TokenStore, default_config_dir

log = logging.getLogger(__name__)

PROVIDER = "twitch"
AUTH_URL = "https://id.twitch.tv/oauth2/authorize"
TOKEN_URL = "https://id.twitch.tv/oauth2/token"
API_BASE = "https://api.twitch.tv/helix"
SCOPES = ("channel:manage:broadcast", "user:read:email")
APP_FILE_NAME = "twitch_app.json"


class TwitchError(Exception):
    """Raised when connecting to Twitch or updating the channel fails."""


def make_config(client_id: str, client_secret: str = "") -> OAuthConfig:
    """Return the OAuth settings for Twitch with the given application credentials."""
    return OAuthConfig(AUTH_URL, TOKEN_URL, client_id, client_secret, SCOPES)


def _read_app_file(path: Path) -> tuple[str, str]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return "", ""
    if not isinstance(data, dict):
        return "", ""

    def text(key: str) -> str:
        value = data.get(key)
        return value if isinstance(value, str) else ""

    return text("client_id"), text("client_secret")


class TwitchProvider:
    """Holds the Twitch session: application credentials, tokens and user identity.

    Application credentials are read from ``<config_dir>/twitch_app.json``,
    of the form ``{"client_id": "...", "client_secret": "..."}``.
    Callables in ``connection_listeners`` are called with the new connection state.
    """

    def __init__(
        self,
        config_dir: str | os.PathLike[str] | None = None,
        http: HttpClient | None = None,
        flow: OAuthFlow | None = None,
        store: TokenStore | None = None,
    ) -> None:
        self.config_dir = Path(config_dir) if config_dir is not None else default_config_dir()
        self.http = http if http is not None else HttpClient()
        self.flow = flow if flow is not None else OAuthFlow(self.http)
        self.store = store if store is not None else TokenStore(self.config_dir)
        self.connection_listeners: list[Callable[[bool], Any]] = []

        self.client_id, self.client_secret = _read_app_file(self.config_dir / APP_FILE_NAME)
        self.access_token = ""
        self.refresh_token = ""
        self.user_id = ""
        self.display_name = ""

        if not self.client_id:
            log.warning(
                "Twitch client_id not configured. Create %s with "
                '{"client_id":"...","client_secret":"..."}',
                self.config_dir / APP_FILE_NAME,
            )

    def is_connected(self) -> bool:
        return bool(self.access_token)

    def _emit(self, connected: bool) -> None:
        for listener in list(self.connection_listeners):
            listener(connected)

    def _auth_headers(self) -> dict[str, str]:
        return {"Client-Id": self.client_id, "Authorization": f"Bearer {self.access_token}"}

    def try_restore(self) -> bool:
        """Load saved tokens and validate them, refreshing if needed."""
        saved = self.store.load(PROVIDER)
        if saved is None:
            return False
        self.access_token, self.refresh_token = saved
        if self.fetch_user_info():
            self._emit(True)
            return True
        ok = self.ensure_valid_token()
        if ok:
            self._emit(True)
        return ok

    def connect(self, timeout: float | None = None) -> None:
        """Run the browser authorization and store the resulting tokens."""
        if not self.client_id:
            raise TwitchError("Twitch client_id not configured. See log for instructions.")
        try:
            self.flow.start(make_config(self.client_id, self.client_secret))
            tokens = self.flow.wait(timeout)
        except OAuthError as exc:
            raise TwitchError(str(exc)) from exc
        self.access_token = tokens.access_token
        self.refresh_token = tokens.refresh_token
        self.store.save(PROVIDER, tokens.access_token, tokens.refresh_token)
        if not self.fetch_user_info():
            raise TwitchError("Failed to fetch user info")
        self._emit(True)

    def disconnect(self) -> None:
        """Forget the session and remove stored tokens."""
        self.access_token = ""
        self.refresh_token = ""
        self.user_id = ""
        self.display_name = ""
        self.store.clear(PROVIDER)
        self._emit(False)

    def fetch_user_info(self) -> bool:
        """Look up the authorized user; return whether it succeeded."""
        response = self.http.get(f"{API_BASE}/users", self._auth_headers())
        if response.status != 200:
            return False
        users = response.json_object().get("data")
        if not isinstance(users, list) or not users or not isinstance(users[0], dict):
            return False
        user = users[0]
        user_id = user.get("id")
        display_name = user.get("display_name")
        self.user_id = user_id if isinstance(user_id, str) else ""
        self.display_name = display_name if isinstance(display_name, str) else ""
        log.info("Twitch connected: %s (id=%s)", self.display_name, self.user_id)
        return True

    def resolve_game_id(self, game_name: str) -> str:
        """Return the Twitch id of a game or category, or an empty string."""
        url = f"{API_BASE}/games?name={quote(game_name, safe='')}"
        response = self.http.get(url, self._auth_headers())
        if response.status != 200:
            return ""
        games = response.json_object().get("data")
        if not isinstance(games, list) or not games or not isinstance(games[0], dict):
            return ""
        game_id = games[0].get("id")
        return game_id if isinstance(game_id, str) else ""

    def ensure_valid_token(self) -> bool:
        """Refresh the access token and re-check the user; return whether it worked."""
        if not self.refresh_token:
            return False
        try:
            tokens = self.flow.refresh(
                make_config(self.client_id, self.client_secret), self.refresh_token
            )
        except OAuthError:
            return False
        self.access_token = tokens.access_token
        if tokens.refresh_token:
            self.refresh_token = tokens.refresh_token
        self.store.save(PROVIDER, self.access_token, self.refresh_token)
        return self.fetch_user_info()

    def update_channel(self, title: str, game_name: str = "") -> None:
        """Set the channel title and, if ``game_name`` is given, its category."""
        if not self.is_connected():
            raise TwitchError("Not connected")
        game_id = ""
        if game_name:
            game_id = self.resolve_game_id(game_name)
            if not game_id:
                raise TwitchError(f"Game not found: {game_name}")
        self._patch_channel(title, game_id, retry=True)

    def _patch_channel(self, title: str, game_id: str, retry: bool) -> None:
        url = f"{API_BASE}/channels?broadcaster_id={quote(self.user_id, safe='')}"
        payload = {"title": title}
        if game_id:
            payload["game_id"] = game_id
        body = json.dumps(
            payload, separators=(",", ":"), sort_keys=True, ensure_ascii=False
        ).encode("utf-8")
        headers = {**self._auth_headers(), "Content-Type": "application/json"}
        response = self.http.patch(url, headers, body)
        if response.status in (200, 204):
            log.info("Twitch channel updated: %s", title)
            return
        if response.status == 401 and retry:
            # Token expired: refresh and retry once, leaving the category unchanged.
            if not self.ensure_valid_token():
                raise TwitchError("Token refresh failed")
            if not self.is_connected():
                raise TwitchError("Not connected")
            self._patch_channel(title, "", retry=False)
            return
        raise TwitchError(f"HTTP {response.status}: {response.text}")