"""
Replay block source.

Plays back a recorded block trace (YAML or JSON) as if it were a live
subscription. Useful for running the monitor offline against blocks captured
from a bridge hub, and for tests.

Trace format:

    blocks:
      - number: 101
        hash: "0x..."              # optional
        parent_hash: "0x..."       # optional
        events:
          - {section: bridgeRococoMessages, method: MessagesReceived}
        parent_state:              # optional, defaults to previous block's state
          grandpa_authority_set_id: 7
          para_heads: [1013]
        state:
          grandpa_authority_set_id: 7
          para_heads: [1013]
"""

from __future__ import annotations

import logging
import os
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import yaml

from models.block import BlockEvent, BlockNotification, StateSnapshot
from .base import BlockSource, BlockSourceConfig


logger = logging.getLogger(__name__)


@dataclass
class ReplayBlockSourceConfig(BlockSourceConfig):
    """
    Configuration for replay sources.

    Attributes:
        path: Trace file to play back.
        interval: Seconds to wait between blocks (0 = as fast as possible).
    """
    path: str = ""
    interval: float = 0.0

    @classmethod
    def from_source_config(cls, source_cfg: Dict[str, Any], source_id: str = "replay") -> "ReplayBlockSourceConfig":
        """
        Adapter: Create ReplayBlockSourceConfig from the `source` config dict.

        Args:
            source_cfg: Source configuration dict (from config.yaml).
            source_id: Identifier for this source.
        """
        return cls(
            source_id=source_id,
            path=source_cfg.get("path", ""),
            interval=float(source_cfg.get("interval", 0.0) or 0.0),
        )


def parse_trace(raw: Any) -> List[BlockNotification]:
    """
    Convert a loaded trace document into block notifications.

    Raises:
        ValueError: If the document does not follow the trace format.
    """
    if not isinstance(raw, dict) or not isinstance(raw.get("blocks"), list):
        raise ValueError("Block trace must be a mapping with a 'blocks' list")

    blocks: List[BlockNotification] = []
    previous_state = StateSnapshot()
    for i, entry in enumerate(raw["blocks"]):
        if not isinstance(entry, dict) or "number" not in entry:
            raise ValueError(f"Block trace entry {i} must be a mapping with a 'number'")
        try:
            number = int(entry["number"])
        except (TypeError, ValueError) as e:
            raise ValueError(f"Block trace entry {i} has an invalid number: {entry['number']!r}") from e
        raw_events = entry.get("events") or []
        if not isinstance(raw_events, list):
            raise ValueError(f"Block trace entry {i} events must be a list")
        events = [BlockEvent.from_dict(e) for e in raw_events]

        if "parent_state" in entry:
            parent_state = StateSnapshot.from_dict(entry["parent_state"])
        else:
            parent_state = previous_state
        current_state = StateSnapshot.from_dict(entry["state"]) if "state" in entry else parent_state

        blocks.append(BlockNotification.create(
            number=number,
            events=events,
            parent_state=parent_state,
            current_state=current_state,
            block_hash=entry.get("hash"),
            parent_hash=entry.get("parent_hash"),
        ))
        previous_state = current_state
    return blocks


class ReplayBlockSource(BlockSource):
    """
    Block source backed by a recorded trace file.

    The whole trace is parsed on open(), so a malformed file fails before
    any block is observed.

    Example:
        config = ReplayBlockSourceConfig(path="traces/westend.yaml")
        with ReplayBlockSource(config) as source:
            for block in source:
                process(block)
    """

    def __init__(self, config: ReplayBlockSourceConfig, blocks: Optional[List[BlockNotification]] = None):
        super().__init__(config)
        self._replay_config = config
        self._blocks: List[BlockNotification] = list(blocks) if blocks is not None else []
        self._preloaded = blocks is not None
        self._pos = 0
        self._closed = threading.Event()

    @property
    def path(self) -> str:
        return self._replay_config.path

    def open(self) -> None:
        if not self._preloaded:
            if not self.path or not os.path.exists(self.path):
                raise RuntimeError(f"Block trace not found: {self.path!r}")
            with open(self.path, "r") as f:
                self._blocks = parse_trace(yaml.safe_load(f))
            logger.info(f"Loaded {len(self._blocks)} blocks from {self.path}")

        self._pos = 0
        self._block_index = 0
        self._closed.clear()
        self._is_open = True

    def read(self) -> Optional[BlockNotification]:
        if not self._is_open or self._pos >= len(self._blocks):
            return None

        if self._pos > 0 and self._replay_config.interval > 0:
            # close() wakes the wait up
            if self._closed.wait(self._replay_config.interval):
                return None

        block = self._blocks[self._pos]
        self._pos += 1
        self._block_index += 1
        return block

    def close(self) -> None:
        self._is_open = False
        self._closed.set()
