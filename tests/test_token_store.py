from streamsync.token_store import TokenStore, default_config_dir


def test_path_for_uses_provider_name(tmp_path):
    store = TokenStore(tmp_path)
    assert store.path_for("twitch") == tmp_path / "twitch_tokens.dat"


def test_save_and_load_round_trip(tmp_path):
    store = TokenStore(tmp_path)
    store.save("twitch", "token", "placeholder")
    assert store.load("twitch") == ("token", "placeholder")


def test_save_writes_one_token_per_line(tmp_path):
    store = TokenStore(tmp_path)
    store.save("twitch", "token", "placeholder")
    assert store.path_for("twitch").read_text(encoding="utf-8") == "token\nplaceholder\n"


def test_save_creates_missing_directory(tmp_path):
    store = TokenStore(tmp_path / "nested" / "dir")
    store.save("twitch", "token", "")
    assert store.load("twitch") == ("token", "")


def test_load_missing_returns_none(tmp_path):
    assert TokenStore(tmp_path).load("twitch") is None


def test_load_single_line_returns_none(tmp_path):
    store = TokenStore(tmp_path)
    store.path_for("twitch").write_text("token\n", encoding="utf-8")
    assert store.load("twitch") is None


def test_load_empty_access_token_returns_none(tmp_path):
    store = TokenStore(tmp_path)
    store.save("twitch", "", "placeholder")
    assert store.load("twitch") is None


def test_load_without_trailing_newline(tmp_path):
    store = TokenStore(tmp_path)
    store.path_for("twitch").write_text("token\nplaceholder", encoding="utf-8")
    assert store.load("twitch") == ("token", "placeholder")


def test_providers_are_separate(tmp_path):
    store = TokenStore(tmp_path)
    store.save("twitch", "token", "placeholder")
    assert store.load("youtube") is None


def test_clear_removes_tokens(tmp_path):
    store = TokenStore(tmp_path)
    store.save("twitch", "token", "placeholder")
    store.clear("twitch")
    assert not store.path_for("twitch").exists()
    assert store.load("twitch") is None


def test_clear_missing_is_harmless(tmp_path):
    store = TokenStore(tmp_path)
    store.clear("twitch")
    assert not store.path_for("twitch").exists()


def test_default_config_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.setenv("APPDATA", str(tmp_path))
    directory = default_config_dir()
    assert directory.name == "obs-stream-sync"
    assert directory.is_absolute()


def test_default_store_uses_default_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    monkeypatch.setenv("APPDATA", str(tmp_path))
    assert TokenStore().config_dir == default_config_dir()