"""quire — MDX content loading for static sites."""

__version__ = "0.1.0"
