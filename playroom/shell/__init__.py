"""
Shell Module - Switching between activities.
"""

from .orchestrator import (
    ACTIVITY_FAILED,
    ActivityRegistry,
    Orchestrator,
    ShellState,
    TransitionResult,
)
from .playroom import Playroom

__all__ = [
    "ACTIVITY_FAILED",
    "ActivityRegistry",
    "Orchestrator",
    "ShellState",
    "TransitionResult",
    "Playroom",
]
