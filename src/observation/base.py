"""
BlockSource interface for pluggable block feeds.

This defines the contract that all block sources must implement, so the
monitor engine can observe any feed of blocks:
- Recorded block traces (replay)
- Live node subscriptions
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterator, Optional

from models.block import BlockNotification


@dataclass
class BlockSourceConfig:
    """
    Base configuration for block sources.

    Attributes:
        source_id: Unique identifier for this source (e.g., "bridge-hub-westend").
    """
    source_id: str = "default"


class BlockSource(ABC):
    """
    Abstract base class for block sources.

    A block source delivers block notifications in production order, one at
    a time. Each notification carries the block's events and the bridge
    state at the block and at its parent.

    Lifecycle:
        1. Create instance with config
        2. Call open() to subscribe
        3. Call read() repeatedly to get blocks
        4. Call close() to unsubscribe

    Can also be used as a context manager:
        with ReplayBlockSource(config) as source:
            for block in source:
                process(block)
    """

    def __init__(self, config: BlockSourceConfig):
        self._config = config
        self._is_open = False
        self._block_index = 0

    @property
    def source_id(self) -> str:
        """Unique identifier for this source."""
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        """Whether the source is currently subscribed and ready to read."""
        return self._is_open

    @property
    def block_index(self) -> int:
        """Number of blocks read since open."""
        return self._block_index

    @abstractmethod
    def open(self) -> None:
        """
        Subscribe to the block feed.

        Must be called before read().

        Raises:
            RuntimeError: If the source cannot be opened.
            ValueError: If the feed is malformed.
        """
        pass

    @abstractmethod
    def read(self) -> Optional[BlockNotification]:
        """
        Read the next block from the source.

        Returns:
            The next BlockNotification, or None once the feed is exhausted
            or the source has been closed.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """
        Unsubscribe from the block feed.

        Safe to call multiple times, and from a thread other than the reader.
        """
        pass

    def __enter__(self) -> "BlockSource":
        """Context manager entry - opens the source."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - closes the source."""
        self.close()

    def __iter__(self) -> Iterator[BlockNotification]:
        """
        Iterate over blocks from the source.

        Yields BlockNotification objects until the source is exhausted or closed.
        The source must be open before iterating.
        """
        if not self._is_open:
            raise RuntimeError("Source must be open before iterating")

        while True:
            block = self.read()
            if block is None:
                break
            yield block
