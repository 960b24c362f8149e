"""
Audio Cues - Fire-and-forget sound feedback.

Tone synthesis lives behind a sink; the player only decides whether a
cue should be heard. The default sink logs the cue.
"""

from __future__ import annotations
from enum import Enum
from typing import Callable, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from .store import Store

logger = logging.getLogger(__name__)

CueSink = Callable[["CueKind"], None]


class CueKind(str, Enum):
    """Sound cues activities can request."""
    POP = "pop"
    SUCCESS = "success"
    THUD = "thud"
    MAGICAL_CHIME = "magical_chime"


def log_cue(kind: CueKind):
    logger.debug("cue: %s", kind.value)


class NullCuePlayer:
    """Plays nothing."""

    def play_cue(self, kind: CueKind):
        pass


class CuePlayer:
    """
    Mute-aware cue player.

    Follows the store's is_muted field through a subscription, so a
    toggle takes effect for the very next cue.
    """

    def __init__(self, store: Store | None = None, sink: CueSink | None = None):
        self.sink = sink or log_cue
        self.is_muted = store.is_muted if store else False
        self._unsubscribe = None
        if store is not None:
            self._unsubscribe = store.subscribe("is_muted", self._on_mute_changed)

    def play_cue(self, kind: CueKind):
        if self.is_muted:
            return
        try:
            self.sink(kind)
        except Exception as e:
            logger.warning("Cue %s failed: %s", kind.value, e)

    def close(self):
        """Stop following the store."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_mute_changed(self, is_muted: bool, _old: bool):
        self.is_muted = bool(is_muted)
