from __future__ import annotations

from burrow.engine.navigator import ExtractJob, Navigator
from burrow.engine.state import EngineState
from burrow.engine.transitions import ALLOWED, Command, permits

__all__ = [
    "ALLOWED",
    "Command",
    "EngineState",
    "ExtractJob",
    "Navigator",
    "permits",
]
