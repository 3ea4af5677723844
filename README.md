# streamsync

`streamsync` sets your stream's title and category on Twitch, from the
command line or from Python.

It signs you in to Twitch with the OAuth 2.0 authorization-code flow and
PKCE. It prints the Twitch authorization URL to standard error for you to
open in a browser, and a small server listening on `127.0.0.1` (on a free
port, path `/callback`) receives the redirect. The tokens it gets back are
stored in the configuration directory, so later runs reuse them. When a
stored access token no longer works, `streamsync` tries the refresh token.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Configuration directory

`streamsync.token_store.default_config_dir()` returns an `obs-stream-sync`
directory under:

- `%APPDATA%` on Windows,
- `~/Library/Application Support` on macOS,
- `$XDG_CONFIG_HOME`, or `~/.config`, elsewhere.

The command line takes `--config-dir` to use another directory.

## Registering an application

Register an application in the Twitch developer console, then put its
credentials in `twitch_app.json` in the configuration directory:

```json
{"client_id": "placeholder", "client_secret": "secret"}
```

The client secret is optional; leave it empty for a PKCE-only public client.
Without a `client_id`, connecting fails with
`Twitch client_id not configured. See log for instructions.`

The module `streamsync.app_credentials` reads and writes credentials kept per
platform in a shared JSON file:

- `load_credentials(path, platform="twitch")` returns an `AppCredentials`
  (`client_id`, `client_secret`, `configured`); empty values when the file or
  the entry is missing.
- `save_credentials(path, platform, client_id, client_secret)` trims and
  writes one platform's entry, keeping the other entries in the file. It
  raises `CredentialsError` when the file cannot be written.

## Command line

```
streamsync [--config-dir DIR] [-v] status
streamsync [--config-dir DIR] [-v] connect [--timeout SECONDS]
streamsync [--config-dir DIR] [-v] disconnect
streamsync [--config-dir DIR] [-v] apply --title TITLE [--category NAME] [--no-twitch]
```

Every command first tries to restore the saved session.

- `status` shows whether Twitch is connected, and as whom.
- `connect` runs the authorization and waits for it (300 seconds by default).
  It exits 1 if authorization fails.
- `disconnect` forgets the session and deletes the stored tokens.
- `apply` sets the title and, if `--category` is given, the category, looked
  up by game name. An empty title is refused (exit 2). An unknown game fails
  with `Game not found: <name>` (exit 1). If no platform was selected and
  connected, it prints `No connected platforms to update.` and exits 1.
- `-v` turns on progress logging.

## Python

```python
from streamsync.cli import apply_stream_info
from streamsync.twitch import TwitchProvider

provider = TwitchProvider()  # uses default_config_dir()
if not provider.try_restore():
    provider.connect(timeout=300)
provider.update_channel("Late night speedruns", "Celeste")
```

`apply_stream_info(provider, title, category="", use_twitch=True)` trims its
inputs, raises `ValueError` for an empty title, and returns the names of the
platforms it updated (`["Twitch"]` or an empty list).

`TwitchProvider` exposes `is_connected()`, `display_name`, `user_id`, and a
`connection_listeners` list of callables that are called with the new
connection state. If updating the channel gets HTTP 401, it refreshes the
token and retries once. When it retries, it leaves the category unchanged.

Failures raise exceptions:

- `streamsync.twitch.TwitchError` when connecting or updating the channel fails.
- `streamsync.oauth_flow.OAuthError` when authorization is refused, the state
  does not match, a token request fails, or the wait times out.

`streamsync.oauth_flow.OAuthFlow` takes an `open_browser` callable if you want
something other than printing the URL, for example `webbrowser.open`.

`streamsync.http_client.HttpClient` wraps a `requests` session. Instead of
raising on a failed request, it returns an `HttpResponse` with `status`,
`body` and `error`.

## Token storage

Tokens are written to `<provider>_tokens.dat` in the configuration directory.
The access token is on the first line and the refresh token is on the second.
`streamsync.token_store.TokenStore` saves, loads and clears these files.

## What it does not do

- Tokens are stored as plain text, not encrypted.
- It does not open a browser by itself from the command line; it prints the URL.
- Only Twitch is supported, and only the title and category are set.
- There is no graphical interface.