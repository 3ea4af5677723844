"""Set a live stream's title and category on Twitch, with a loopback OAuth PKCE sign-in."""

__version__ = "0.1.0"