import json

import pytest

from streamsync.app_credentials import (
    AppCredentials,
    CredentialsError,
    load_credentials,
    save_credentials,
)


def test_load_missing_file_gives_empty(tmp_path):
    creds = load_credentials(tmp_path / "oauth_apps.json", "twitch")
    assert creds == AppCredentials("", "")
    assert not creds.configured


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "oauth_apps.json"
    save_credentials(path, "twitch", "client-1", "secret")
    creds = load_credentials(path, "twitch")
    assert creds == AppCredentials("client-1", "secret")
    assert creds.configured


def test_save_trims_values(tmp_path):
    path = tmp_path / "oauth_apps.json"
    saved = save_credentials(path, "twitch", "  client-1 \n", " secret ")
    assert saved == AppCredentials("client-1", "secret")
    assert load_credentials(path, "twitch") == saved


def test_save_preserves_other_platforms(tmp_path):
    path = tmp_path / "oauth_apps.json"
    path.write_text(json.dumps({"youtube": {"client_id": "yt-1"}}), encoding="utf-8")
    save_credentials(path, "twitch", "client-1", "")
    root = json.loads(path.read_text(encoding="utf-8"))
    assert root["youtube"] == {"client_id": "yt-1"}
    assert root["twitch"] == {"client_id": "client-1", "client_secret": ""}


def test_save_replaces_invalid_file(tmp_path):
    path = tmp_path / "oauth_apps.json"
    path.write_text("{not json", encoding="utf-8")
    save_credentials(path, "twitch", "client-1", "")
    assert load_credentials(path, "twitch").client_id == "client-1"


def test_save_creates_parent_directory(tmp_path):
    path = tmp_path / "config" / "plugin" / "oauth_apps.json"
    save_credentials(path, "twitch", "client-1", "secret")
    assert path.exists()


def test_load_invalid_json_gives_empty(tmp_path):
    path = tmp_path / "oauth_apps.json"
    path.write_text("garbage", encoding="utf-8")
    assert load_credentials(path, "twitch") == AppCredentials()


def test_load_ignores_non_object_entry(tmp_path):
    path = tmp_path / "oauth_apps.json"
    path.write_text(json.dumps({"twitch": "client-1"}), encoding="utf-8")
    assert load_credentials(path, "twitch") == AppCredentials()


def test_load_other_platform_missing(tmp_path):
    path = tmp_path / "oauth_apps.json"
    save_credentials(path, "twitch", "client-1", "secret")
    assert load_credentials(path, "kick") == AppCredentials()


def test_save_to_directory_raises(tmp_path):
    with pytest.raises(CredentialsError):
        save_credentials(tmp_path, "twitch", "client-1", "secret")