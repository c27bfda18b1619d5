"""
Event classification for a single block.

Partitions the events of one block into the four bridge categories and
summarizes them as EventCounts. Classification is pure: the same events and
descriptor always give the same counts, and it does not care whether the
events were read at the block or at its parent.
"""

from __future__ import annotations

from typing import Iterable

from bridges.descriptor import BridgeDescriptor
from models.block import BlockEvent
from models.counts import EventCounts


def count_consensus_header_imports(descriptor: BridgeDescriptor, events: Iterable[BlockEvent]) -> int:
    """Number of bridged GRANDPA header imports among `events`."""
    return sum(1 for event in events if descriptor.is_consensus_header_import(event))


def count_parachain_header_imports(descriptor: BridgeDescriptor, events: Iterable[BlockEvent]) -> int:
    """Number of bridged parachain head imports among `events`."""
    return sum(1 for event in events if descriptor.is_parachain_header_import(event))


def classify(descriptor: BridgeDescriptor, events: Iterable[BlockEvent]) -> EventCounts:
    """
    Summarize the bridge events of one block.

    Args:
        descriptor: Bridge whose pallets are recognized.
        events: All events attached to the block.

    Returns:
        EventCounts with message flags and exact header import tallies.
        An empty event list yields all-false / zero counts.
    """
    received = False
    delivered = False
    consensus_imports = 0
    parachain_imports = 0

    for event in events:
        if descriptor.is_message_received(event):
            received = True
        elif descriptor.is_message_delivered(event):
            delivered = True
        elif descriptor.is_consensus_header_import(event):
            consensus_imports += 1
        elif descriptor.is_parachain_header_import(event):
            parachain_imports += 1

    return EventCounts(
        messages_received=received,
        messages_delivered=delivered,
        consensus_header_imports=consensus_imports,
        parachain_header_imports=parachain_imports,
    )
