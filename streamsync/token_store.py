"""Per-provider storage of OAuth access and refresh tokens."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

log = logging.getLogger(__name__)

APP_DIR_NAME = "obs-stream-sync"


def default_config_dir() -> Path:
    """Return the per-user configuration directory for this application."""
    if os.name == "nt":
        base = os.environ.get("APPDATA") or Path.home() / "AppData" / "Roaming"
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config"
    return Path(base) / APP_DIR_NAME


class TokenStore:
    """Keeps tokens in ``<config_dir>/<provider>_tokens.dat``, one per line."""

    def __init__(self, config_dir: str | os.PathLike[str] | None = None) -> None:
        self.config_dir = Path(config_dir) if config_dir is not None else default_config_dir()

    def path_for(self, provider: str) -> Path:
        return self.config_dir / f"{provider}_tokens.dat"

    def save(self, provider: str, access_token: str, refresh_token: str) -> None:
        path = self.path_for(provider)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
        except OSError:
            pass
        try:
            with path.open("w", encoding="utf-8", newline="\n") as handle:
                handle.write(f"{access_token}\n{refresh_token}\n")
        except OSError:
            log.warning("cannot write token file: %s", path)

    def load(self, provider: str) -> tuple[str, str] | None:
        """Return ``(access_token, refresh_token)`` or None when nothing usable is stored."""
        path = self.path_for(provider)
        try:
            content = path.read_text(encoding="utf-8")
        except OSError:
            return None
        lines = content.split("\n")
        if content.endswith("\n"):
            lines.pop()
        if len(lines) < 2:
            return None
        access_token, refresh_token = lines[0], lines[1]
        if not access_token:
            return None
        return access_token, refresh_token

    def clear(self, provider: str) -> None:
        self.path_for(provider).unlink(missing_ok=True)