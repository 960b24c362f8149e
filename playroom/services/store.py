"""
Store - Process-wide state cell with per-field subscriptions.

One injectable service replaces ad hoc globals:
- Fields: is_muted (persisted), current_activity, failure_notice
- set() is the single writer; subscribers of every changed field are
  notified synchronously with (new_value, old_value)
- The mute flag is read from storage at construction and written on
  every change, under the key "toddlerGamesMuted"

Storage failures never propagate: an unreadable value reads as "not
muted", a failed write is logged.
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Callable
import json
import logging

logger = logging.getLogger(__name__)

MUTE_KEY = "toddlerGamesMuted"

Subscriber = Callable[[Any, Any], None]


class MemoryStorage:
    """Key/value storage kept in memory (tests, ephemeral shells)."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str):
        self._items[key] = value


class JsonFileStorage:
    """
    Key/value storage in a single JSON file.

    The file is re-read on every get so several processes (CLI and
    server) see each other's writes.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def get_item(self, key: str) -> str | None:
        items = self._load()
        value = items.get(key)
        return None if value is None else str(value)

    def set_item(self, key: str, value: str):
        items = self._load()
        items[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(items, f, indent=2, sort_keys=True)

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"State file {self.path} does not hold an object")
        return data


class Store:
    """
    Publish/subscribe state store.

    Usage:
        store = Store(JsonFileStorage("~/.playroom/state.json"))
        unsubscribe = store.subscribe("is_muted", on_mute)
        store.set(is_muted=True)     # on_mute(True, False)
        unsubscribe()
    """

    FIELDS = ("is_muted", "current_activity", "failure_notice")

    def __init__(self, storage: MemoryStorage | JsonFileStorage | None = None):
        self.storage = storage or MemoryStorage()
        self._state: dict[str, Any] = {
            "is_muted": self._load_mute(),
            "current_activity": None,
            "failure_notice": False,
        }
        self._subscribers: dict[str, list[Subscriber]] = {}

    def get(self, key: str) -> Any:
        self._check_field(key)
        return self._state[key]

    def snapshot(self) -> dict[str, Any]:
        """A copy of the whole state."""
        return dict(self._state)

    @property
    def is_muted(self) -> bool:
        return bool(self._state["is_muted"])

    def set(self, **updates: Any):
        """
        Apply updates and notify subscribers of the fields that changed.

        Subscribers run after every field has been written, so a
        subscriber reading the store sees the complete new state.
        """
        for key in updates:
            self._check_field(key)

        old = dict(self._state)
        self._state.update(updates)
        changed = [key for key in updates if old[key] != self._state[key]]

        if "is_muted" in updates:
            self._save_mute(bool(self._state["is_muted"]))

        for key in changed:
            for callback in list(self._subscribers.get(key, [])):
                callback(self._state[key], old[key])

    def subscribe(self, key: str, callback: Subscriber) -> Callable[[], None]:
        """Subscribe to one field. Returns an unsubscribe function."""
        self._check_field(key)
        self._subscribers.setdefault(key, []).append(callback)

        def unsubscribe():
            callbacks = self._subscribers.get(key, [])
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def _check_field(self, key: str):
        if key not in self.FIELDS:
            raise KeyError(f"Unknown store field: {key}")

    def _load_mute(self) -> bool:
        try:
            return self.storage.get_item(MUTE_KEY) == "true"
        except Exception as e:
            logger.warning("Could not read mute state, defaulting to unmuted: %s", e)
            return False

    def _save_mute(self, is_muted: bool):
        try:
            self.storage.set_item(MUTE_KEY, "true" if is_muted else "false")
        except Exception as e:
            logger.error("Failed to save mute state: %s", e)
