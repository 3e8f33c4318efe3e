"""bloglist-api: accounts, sessions, blog entries and like-ranked listing."""

__version__ = "1.0.0"
