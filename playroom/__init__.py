"""
Playroom - Interactive activity shell for young children

A headless, single-threaded component framework for tap, drag and timing
activities hosted in one shared surface. The framework provides:
- Resource scopes that release every timer, frame callback and listener
- An activity lifecycle (mount / unmount / re-mount)
- A drag-and-drop gesture engine with match / mismatch / miss resolution
- An orchestrator enforcing a single mounted activity
"""

__version__ = "0.1.0"
