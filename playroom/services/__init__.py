"""
Services Module - Collaborators shared by every activity.

Activities receive these through their constructor. The default bundle is
all no-ops, so activity code never checks whether a service exists.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from .audio import CueKind, CuePlayer, NullCuePlayer
from .speech import Announcer, NullAnnouncer, PRAISE_PHRASES
from .effects import Burst, NullEffect, ParticleEffect
from .store import JsonFileStorage, MemoryStorage, MUTE_KEY, Store


@dataclass
class Services:
    """The audio, voice and effect collaborators of an activity."""
    audio: Any = field(default_factory=NullCuePlayer)
    voice: Any = field(default_factory=NullAnnouncer)
    effects: Any = field(default_factory=NullEffect)

    @classmethod
    def null(cls) -> Services:
        return cls()

    @classmethod
    def for_store(cls, store: Store, width: float = 1024, height: float = 768) -> Services:
        """Mute-aware services following store."""
        return cls(
            audio=CuePlayer(store=store),
            voice=Announcer(store=store),
            effects=ParticleEffect(width=width, height=height),
        )


__all__ = [
    "Services",
    "CueKind",
    "CuePlayer",
    "NullCuePlayer",
    "Announcer",
    "NullAnnouncer",
    "PRAISE_PHRASES",
    "Burst",
    "ParticleEffect",
    "NullEffect",
    "Store",
    "MemoryStorage",
    "JsonFileStorage",
    "MUTE_KEY",
]
