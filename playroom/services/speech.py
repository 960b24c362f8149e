"""
Announcer - Fire-and-forget spoken feedback.

Backend selection (native voices, remote TTS) is outside the shell; the
announcer hands text to a sink. Muting stops any utterance in progress.
"""

from __future__ import annotations
from typing import Callable, TYPE_CHECKING
import logging
import random

if TYPE_CHECKING:
    from .store import Store

logger = logging.getLogger(__name__)

PRAISE_PHRASES = (
    "Bravo !",
    "Très bien !",
    "Excellent !",
    "Super !",
    "Génial !",
    "Parfait !",
)


class NullAnnouncer:
    """Says nothing."""

    def speak(self, text: str):
        pass

    def speak_positive(self):
        pass

    def stop(self):
        pass


class Announcer:
    """
    Mute-aware announcer.

    Only the latest utterance matters: speaking cancels the previous one,
    like a speech queue that is flushed on every call.
    """

    def __init__(
        self,
        store: Store | None = None,
        sink: Callable[[str], None] | None = None,
        on_stop: Callable[[], None] | None = None,
        rng: random.Random | None = None,
    ):
        self.sink = sink or (lambda text: logger.debug("speak: %s", text))
        self.on_stop = on_stop
        self.rng = rng or random.Random()
        self.is_muted = store.is_muted if store else False
        self.last_spoken: str | None = None
        if store is not None:
            store.subscribe("is_muted", self._on_mute_changed)

    def speak(self, text: str):
        if self.is_muted or not text:
            return
        self.last_spoken = text
        try:
            self.sink(text)
        except Exception as e:
            logger.warning("Speech failed for %r: %s", text, e)

    def speak_positive(self):
        self.speak(self.rng.choice(PRAISE_PHRASES))

    def stop(self):
        self.last_spoken = None
        if self.on_stop is not None:
            self.on_stop()

    def _on_mute_changed(self, is_muted: bool, _old: bool):
        self.is_muted = bool(is_muted)
        if self.is_muted:
            self.stop()
