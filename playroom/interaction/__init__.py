"""
Interaction Module - Gesture engines shared by activities.
"""

from .drag import (
    DragController,
    DragOutcome,
    DragOutcomeKind,
    DragSession,
    DropTarget,
)

__all__ = [
    "DragController",
    "DragOutcome",
    "DragOutcomeKind",
    "DragSession",
    "DropTarget",
]
