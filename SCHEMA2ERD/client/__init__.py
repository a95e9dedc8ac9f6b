"""Client-side services: the parse/share HTTP client and persisted preferences."""

from .parse_client import DebouncedRefresh, ParseClient, ParseOutcome, ShareError, refresh_diagram
from .preferences import LEFT_PANE_COLLAPSED_KEY, JsonKeyValueStore, PanePreferences

__all__ = [
    "DebouncedRefresh",
    "ParseClient",
    "ParseOutcome",
    "ShareError",
    "refresh_diagram",
    "LEFT_PANE_COLLAPSED_KEY",
    "JsonKeyValueStore",
    "PanePreferences",
]
