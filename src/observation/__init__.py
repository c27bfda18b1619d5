"""
Observation layer for pluggable block feeds.

This layer abstracts where blocks come from (recorded trace, live node)
from the monitor engine. Each source implements the BlockSource interface
and returns BlockNotification objects.
"""

from typing import Any, Dict

from .base import BlockSource, BlockSourceConfig
from .replay_source import ReplayBlockSource, ReplayBlockSourceConfig, parse_trace


def create_source_from_config(source_cfg: Dict[str, Any], source_id: str = "main-source") -> BlockSource:
    """
    Factory: create a block source from the `source` config section.

    Raises:
        ValueError: If the source type is unknown.
    """
    source_type = source_cfg.get("type", "replay")
    if source_type == "replay":
        return ReplayBlockSource(ReplayBlockSourceConfig.from_source_config(source_cfg, source_id=source_id))
    raise ValueError(f"Unknown block source type: {source_type}")


__all__ = [
    "BlockSource",
    "BlockSourceConfig",
    "ReplayBlockSource",
    "ReplayBlockSourceConfig",
    "create_source_from_config",
    "parse_trace",
]
