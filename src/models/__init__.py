"""
Typed models for the bridge relay monitor.

These models describe what flows through the monitor: blocks and their
events, per-block counts, cross-block state and the terminal outcome.
"""

from .block import BlockEvent, BlockNotification, StateSnapshot
from .counts import EventCounts
from .errors import InvariantViolation, MonitorFailure, SourceError, TimeoutExpired
from .outcome import MonitorOutcome, MonitorPhase, MonitorState
from .config import Config, MonitorSettings, SourceConfig, WebConfig

__all__ = [
    # Blocks
    "BlockEvent",
    "BlockNotification",
    "StateSnapshot",
    # Counting
    "EventCounts",
    # Failures
    "MonitorFailure",
    "InvariantViolation",
    "TimeoutExpired",
    "SourceError",
    # State/Outcome
    "MonitorOutcome",
    "MonitorPhase",
    "MonitorState",
    # Config
    "Config",
    "MonitorSettings",
    "SourceConfig",
    "WebConfig",
]
