"""Reading and writing OAuth application credentials in ``oauth_apps.json``."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

log = logging.getLogger(__name__)


class CredentialsError(Exception):
    """Raised when the credentials file cannot be written."""


@dataclass(frozen=True)
class AppCredentials:
    client_id: str = ""
    client_secret: str = ""

    @property
    def configured(self) -> bool:
        return bool(self.client_id)


def _read_root(path: Path) -> dict[str, Any] | None:
    try:
        value = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def _string(mapping: dict[str, Any], key: str) -> str:
    value = mapping.get(key)
    return value if isinstance(value, str) else ""


def load_credentials(path: str | os.PathLike[str], platform: str = "twitch") -> AppCredentials:
    """Return the stored credentials for ``platform``; empty ones if absent."""
    root = _read_root(Path(path))
    if root is None:
        return AppCredentials()
    entry = root.get(platform)
    if not isinstance(entry, dict):
        return AppCredentials()
    return AppCredentials(_string(entry, "client_id"), _string(entry, "client_secret"))


def save_credentials(
    path: str | os.PathLike[str], platform: str, client_id: str, client_secret: str
) -> AppCredentials:
    """Store trimmed credentials for ``platform``, keeping other platforms' entries."""
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError:
        pass
    root = _read_root(target) or {}
    credentials = AppCredentials(client_id.strip(), client_secret.strip())
    root[platform] = {
        "client_id": credentials.client_id,
        "client_secret": credentials.client_secret,
    }
    try:
        target.write_text(json.dumps(root, indent=4) + "\n", encoding="utf-8")
    except OSError as exc:
        log.error("failed to save %s", target.name)
        raise CredentialsError(f"Failed to save {target.name}: {exc}") from exc
    return credentials