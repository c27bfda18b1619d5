"""
Monitor state and terminal outcome.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from models.counts import EventCounts
from models.errors import MonitorFailure


MISSING_RECEIVED = "No messages received from bridged chain"
MISSING_DELIVERED = "No messages delivered to bridged chain"


class MonitorPhase(str, Enum):
    OBSERVING = "observing"
    TERMINATED = "terminated"


@dataclass
class MonitorState:
    """
    Cross-block memory of a monitor run.

    Both flags only ever move from False to True.
    """
    ever_received_message: bool = False
    ever_delivered_message: bool = False
    blocks_observed: int = 0
    last_block_number: Optional[int] = None

    def observe(self, block_number: int, counts: EventCounts) -> None:
        self.ever_received_message = self.ever_received_message or counts.messages_received
        self.ever_delivered_message = self.ever_delivered_message or counts.messages_delivered
        self.blocks_observed += 1
        self.last_block_number = block_number

    @property
    def is_complete(self) -> bool:
        return self.ever_received_message and self.ever_delivered_message

    def missing_conditions(self) -> List[str]:
        missing = []
        if not self.ever_received_message:
            missing.append(MISSING_RECEIVED)
        if not self.ever_delivered_message:
            missing.append(MISSING_DELIVERED)
        return missing


@dataclass(frozen=True)
class MonitorOutcome:
    """
    Terminal result of a monitor run.

    Attributes:
        succeeded: True when both message conditions were observed.
        failure: The failure that ended the run, None on success.
        blocks_observed: Blocks that passed the invariant checks.
        block_number: Block at which the outcome was decided (None for timeouts).
    """
    succeeded: bool
    failure: Optional[MonitorFailure] = None
    blocks_observed: int = 0
    block_number: Optional[int] = None

    @classmethod
    def success(cls, blocks_observed: int, block_number: Optional[int]) -> "MonitorOutcome":
        return cls(succeeded=True, blocks_observed=blocks_observed, block_number=block_number)

    @classmethod
    def failed(
        cls,
        failure: MonitorFailure,
        blocks_observed: int,
        block_number: Optional[int] = None,
    ) -> "MonitorOutcome":
        return cls(succeeded=False, failure=failure, blocks_observed=blocks_observed, block_number=block_number)

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    @property
    def reason(self) -> str:
        if self.succeeded:
            return "Messages received and delivered"
        return str(self.failure)

    def to_dict(self) -> dict:
        return {
            "succeeded": self.succeeded,
            "reason": self.reason,
            "failure_type": type(self.failure).__name__ if self.failure else None,
            "blocks_observed": self.blocks_observed,
            "block_number": self.block_number,
        }
