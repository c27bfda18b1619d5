"""
Tests for per-block event classification.
"""

import pytest

from algorithms.classification import (
    classify,
    count_consensus_header_imports,
    count_parachain_header_imports,
)
from bridges.descriptor import BUILTIN_BRIDGES
from models.block import BlockEvent
from models.counts import EventCounts

from conftest import DELIVERED, GRANDPA_IMPORT, PARA_IMPORT, RECEIVED, UNRELATED


class TestClassify:
    def test_empty_block(self, descriptor):
        counts = classify(descriptor, [])

        assert counts == EventCounts()
        assert counts.has_message_activity is False

    def test_unrelated_events_ignored(self, descriptor):
        counts = classify(descriptor, [UNRELATED, BlockEvent("balances", "Transfer")])

        assert counts == EventCounts()

    def test_message_flags(self, descriptor):
        counts = classify(descriptor, [RECEIVED, RECEIVED, DELIVERED])

        assert counts.messages_received is True
        assert counts.messages_delivered is True
        assert counts.has_message_activity is True

    def test_received_only(self, descriptor):
        counts = classify(descriptor, [RECEIVED])

        assert counts.messages_received is True
        assert counts.messages_delivered is False

    def test_header_imports_are_tallied(self, descriptor):
        events = [GRANDPA_IMPORT, PARA_IMPORT, GRANDPA_IMPORT, UNRELATED, GRANDPA_IMPORT]

        counts = classify(descriptor, events)

        assert counts.consensus_header_imports == 3
        assert counts.parachain_header_imports == 1
        assert counts.has_message_activity is False

    def test_message_method_from_other_pallet_ignored(self, descriptor):
        """MessagesReceived of another bridge's pallet does not count."""
        other = BlockEvent("bridgeWestendMessages", "MessagesReceived")

        counts = classify(descriptor, [other])

        assert counts.messages_received is False

    def test_other_bridge_descriptor(self):
        descriptor = BUILTIN_BRIDGES["westend-at-rococo"]
        events = [
            BlockEvent("bridgeWestendMessages", "MessagesDelivered"),
            BlockEvent("bridgeWestendGrandpa", "UpdatedBestFinalizedHeader"),
            RECEIVED,
        ]

        counts = classify(descriptor, events)

        assert counts.messages_delivered is True
        assert counts.messages_received is False
        assert counts.consensus_header_imports == 1

    def test_idempotent(self, descriptor):
        events = (RECEIVED, GRANDPA_IMPORT, PARA_IMPORT, UNRELATED)

        assert classify(descriptor, events) == classify(descriptor, events)

    def test_accepts_generator(self, descriptor):
        counts = classify(descriptor, (e for e in [GRANDPA_IMPORT, DELIVERED]))

        assert counts.consensus_header_imports == 1
        assert counts.messages_delivered is True

    def test_event_payload_does_not_matter(self, descriptor):
        with_data = BlockEvent("bridgeRococoMessages", "MessagesReceived", {"lane": "00000001"})

        assert classify(descriptor, [with_data]) == classify(descriptor, [RECEIVED])


class TestCountHelpers:
    @pytest.mark.parametrize("n", [0, 1, 2, 5])
    def test_count_consensus_header_imports(self, descriptor, n):
        events = [GRANDPA_IMPORT] * n + [PARA_IMPORT]

        assert count_consensus_header_imports(descriptor, events) == n

    def test_count_parachain_header_imports(self, descriptor):
        events = [PARA_IMPORT, PARA_IMPORT, GRANDPA_IMPORT, RECEIVED]

        assert count_parachain_header_imports(descriptor, events) == 2

    def test_helpers_agree_with_classify(self, descriptor):
        events = [PARA_IMPORT, GRANDPA_IMPORT, GRANDPA_IMPORT, DELIVERED]
        counts = classify(descriptor, events)

        assert counts.consensus_header_imports == count_consensus_header_imports(descriptor, events)
        assert counts.parachain_header_imports == count_parachain_header_imports(descriptor, events)
