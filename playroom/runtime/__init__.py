"""
Runtime Module - The headless host every activity runs on.

Provides what a browser page would:
- Scheduler: timers, intervals and frame callbacks on one cooperative thread
- Surface / Element: the element tree with bounds and hit-testing
- InputSource: pointer events with capture
- ResourceScope: tracked acquisition and total release of the above
"""

from .geometry import Point, Rect
from .scheduler import (
    AsyncioScheduler,
    ManualScheduler,
    Scheduler,
    TimerKind,
    TimerToken,
)
from .events import EventKind, EventTarget, PointerEvent
from .surface import Element, Surface
from .input import InputSource
from .scope import ResourceKind, ResourceScope, ScopeHandle

__all__ = [
    # Geometry
    "Point",
    "Rect",
    # Scheduling
    "Scheduler",
    "ManualScheduler",
    "AsyncioScheduler",
    "TimerKind",
    "TimerToken",
    # Events
    "EventKind",
    "EventTarget",
    "PointerEvent",
    "InputSource",
    # Surface
    "Element",
    "Surface",
    # Resources
    "ResourceKind",
    "ResourceScope",
    "ScopeHandle",
]
