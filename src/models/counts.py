"""
EventCounts model: per-block summary of bridge events.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EventCounts:
    """
    Bridge activity observed in exactly one block.

    Attributes:
        messages_received: At least one MessagesReceived event was emitted.
        messages_delivered: At least one MessagesDelivered event was emitted.
        consensus_header_imports: Number of bridged GRANDPA header imports.
        parachain_header_imports: Number of bridged parachain head imports.
    """
    messages_received: bool = False
    messages_delivered: bool = False
    consensus_header_imports: int = 0
    parachain_header_imports: int = 0

    @property
    def has_message_activity(self) -> bool:
        return self.messages_received or self.messages_delivered

    def to_dict(self) -> dict:
        return {
            "messages_received": self.messages_received,
            "messages_delivered": self.messages_delivered,
            "consensus_header_imports": self.consensus_header_imports,
            "parachain_header_imports": self.parachain_header_imports,
        }
