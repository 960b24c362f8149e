"""
Configuration - Environment-driven shell settings.

Environment variables:
    PLAYROOM_ENV            development | production (default: development)
    PLAYROOM_STATE_DIR      Directory holding state.json (default: ~/.playroom)
    PLAYROOM_LOG_LEVEL      Logging level name (default: INFO)
    PLAYROOM_FRAME_MS       Frame interval in milliseconds (default: 16)
    PLAYROOM_SURFACE_SIZE   Surface size as WIDTHxHEIGHT (default: 1024x768)
    ALLOWED_ORIGINS         Comma separated CORS origins (default: *)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import logging
import os
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _parse_size(value: str) -> tuple[int, int]:
    width, _, height = value.lower().partition("x")
    try:
        return int(width), int(height)
    except ValueError:
        raise ValueError(f"Invalid surface size: {value!r} (expected WIDTHxHEIGHT)")


@dataclass
class ShellConfig:
    """Settings for one shell process."""
    env: str = "development"
    state_dir: Path = field(default_factory=lambda: Path.home() / ".playroom")
    log_level: str = "INFO"
    frame_interval_ms: float = 16.0
    surface_width: int = 1024
    surface_height: int = 768
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])

    @property
    def state_file(self) -> Path:
        """Path of the persisted state file (mute flag)."""
        return self.state_dir / "state.json"

    @classmethod
    def from_env(cls) -> ShellConfig:
        """Build a config from PLAYROOM_* environment variables."""
        width, height = _parse_size(os.getenv("PLAYROOM_SURFACE_SIZE", "1024x768"))
        state_dir = os.getenv("PLAYROOM_STATE_DIR")
        return cls(
            env=os.getenv("PLAYROOM_ENV", "development"),
            state_dir=Path(state_dir).expanduser() if state_dir else Path.home() / ".playroom",
            log_level=os.getenv("PLAYROOM_LOG_LEVEL", "INFO").upper(),
            frame_interval_ms=float(os.getenv("PLAYROOM_FRAME_MS", "16")),
            surface_width=width,
            surface_height=height,
            allowed_origins=os.getenv("ALLOWED_ORIGINS", "*").split(","),
        )


def configure_logging(level: str | int = "INFO"):
    """Install a single stream handler on the root logger."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)
