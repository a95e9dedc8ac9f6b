"""Persisted UI preferences.

A small JSON object on disk plays the role of browser local storage:
string keys, string values.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Union

from SCHEMA2ERD.utils.logging import get_logger

logger = get_logger(__name__)

LEFT_PANE_COLLAPSED_KEY = "erd:leftPane:collapsed"


class JsonKeyValueStore:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable preferences file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def get(self, key: str, default: str = "") -> str:
        return self.load().get(key, default)

    def set(self, key: str, value: str) -> None:
        data = self.load()
        data[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)


class PanePreferences:
    """Collapsed/expanded state of the schema input pane.

    Read once on construction; written on every change.
    """

    def __init__(self, store: JsonKeyValueStore):
        self.store = store
        self.collapsed = store.get(LEFT_PANE_COLLAPSED_KEY) == "true"

    def set_collapsed(self, collapsed: bool) -> None:
        self.collapsed = collapsed
        self.store.set(LEFT_PANE_COLLAPSED_KEY, "true" if collapsed else "false")

    def toggle(self) -> bool:
        self.set_collapsed(not self.collapsed)
        return self.collapsed
